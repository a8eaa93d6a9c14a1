# storefront/api/v1/deps.py
import logging

from fastapi import Depends, Header, Request

from storefront.config import Settings
from storefront.core.errors import Forbidden, TokenError, TokenExpired, Unauthenticated
from storefront.core.security import Claims, TokenService, role_satisfies
from storefront.services.accounts import AccountService
from storefront.services.catalog import CatalogQueryBuilder
from storefront.services.pagination import PaginationEngine
from storefront.services.products import ProductService

logger = logging.getLogger(__name__)


# ---- service accessors (built once in create_app, stored on app.state) ----
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_account_service(request: Request) -> AccountService:
    return request.app.state.accounts


def get_query_builder(request: Request) -> CatalogQueryBuilder:
    return request.app.state.query_builder


def get_pagination_engine(request: Request) -> PaginationEngine:
    return request.app.state.paginator


def get_product_service(request: Request) -> ProductService:
    return request.app.state.products


# ---- authentication gate ----
async def get_current_claims(
    request: Request,
    authorization: str | None = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
) -> Claims:
    """
    FastAPI dependency that authenticates the request.

    Extracts the token from either:
    1. Authorization header (Bearer token) - preferred method
    2. HttpOnly cookie (accessToken) - fallback method

    Verifies it and attaches the claims to `request.state.claims`.
    No database lookup: a valid signature and unexpired token is enough.

    Raises:
        Unauthenticated (401): no token, invalid token, or expired token
    """
    token = None
    # 1) Prioritize Authorization: Bearer xxx
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
    # 2) Secondly HttpOnly Cookie: accessToken
    if not token:
        token = request.cookies.get("accessToken")

    if not token:
        raise Unauthenticated("Access token is required")

    try:
        claims = tokens.verify(token)
    except TokenExpired:
        logger.debug("rejected expired token")
        raise Unauthenticated("Access token expired")
    except TokenError:
        logger.debug("rejected invalid token")
        raise Unauthenticated("Invalid access token")

    request.state.claims = claims
    return claims


# ---- authorization gate ----
def require_role(required: str):
    """
    Build a dependency that lets through only claims whose role satisfies `required`.

    It depends on `get_current_claims`, so authentication always runs first:
    an anonymous caller gets 401, never 403, whatever order the route lists
    its dependencies in.

    Usage:
        @router.post("", dependencies=[Depends(require_role("admin"))])
    """

    async def _require_role(claims: Claims = Depends(get_current_claims)) -> Claims:
        if not role_satisfies(claims.role, required):
            logger.info("role gate denied user_id=%s role=%s required=%s",
                        claims.user_id, claims.role, required)
            raise Forbidden("You do not have permission to perform this action")
        return claims

    return _require_role


async def require_product_writer(
    request: Request,
    claims: Claims = Depends(get_current_claims),
) -> Claims:
    """Role gate for product writes; the required role comes from Settings."""
    required = get_settings(request).product_write_role
    return await require_role(required)(claims)
