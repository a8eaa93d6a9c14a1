# storefront/api/v1/routers/account.py
from fastapi import APIRouter, Depends, Response, status

from storefront.api.v1.deps import get_account_service, get_current_claims
from storefront.core.security import Claims
from storefront.schemas.account import LoginIn, ProfileUpdateIn, SignupIn
from storefront.services.accounts import AccountService
from storefront.services.serializers import user_to_dict

router = APIRouter(prefix="/account", tags=["account"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def signup(body: SignupIn, accounts: AccountService = Depends(get_account_service)):
    """
    Register a new account and return a session token.

    Email and username must both be unused. The token carries
    {username, email, user_id}.

    Returns:
        201 {"msg": str, "token": str}

    Errors (400, {"msg"}):
        - Missing required keys
        - Email already exist
        - Username already exist
    """
    token = await accounts.signup(body.fullname, body.username, body.email, body.password)
    return {"msg": "User create successfully", "token": token}


@router.post("/login")
async def login(body: LoginIn, response: Response, accounts: AccountService = Depends(get_account_service)):
    """
    Authenticate with username (or email) and password.

    The token is returned in the body and also set as an HttpOnly cookie
    for browser-based clients. Unlike the signup token it carries the role.

    Errors:
        400 missing keys, 401 incorrect username or password
    """
    token = await accounts.login(body.username, body.password)
    response.set_cookie("accessToken", token, httponly=True, secure=False, samesite="lax")
    return {"msg": "Login successfully", "token": token}


@router.patch("")
async def update_account(
    body: ProfileUpdateIn,
    claims: Claims = Depends(get_current_claims),
    accounts: AccountService = Depends(get_account_service),
):
    """Partially update the caller's own profile. Only non-null fields change."""
    user = await accounts.update_profile(claims.user_id, body.model_dump(exclude_none=True))
    return {"msg": "User updated successfully", "data": user_to_dict(user)}


@router.get("/{username}")
async def get_account(
    username: str,
    claims: Claims = Depends(get_current_claims),
    accounts: AccountService = Depends(get_account_service),
):
    """
    Get the authenticated user's profile.

    The profile is looked up from the token's user_id claim; the path
    segment is informational only.

    Errors:
        401 not authenticated, 404 the account no longer exists
    """
    user = await accounts.get_profile(claims.user_id)
    return {"msg": "Get user successfully", "data": user_to_dict(user)}
