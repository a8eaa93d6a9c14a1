# storefront/main.py
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.config import Settings, settings as default_settings
from storefront.core.bootstrap import ensure_default_admin
from storefront.core.db import close_db, init_db
from storefront.core.errors import StorefrontError, UnexpectedError
from storefront.core.security import CredentialService, TokenService
from storefront.api.v1.routers import account, products
from storefront.services.accounts import AccountService
from storefront.services.catalog import CatalogQueryBuilder, CategoryResolver
from storefront.services.pagination import PaginationEngine
from storefront.services.products import ProductService

logger = logging.getLogger("uvicorn.error")


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    # loc looks like ("body", "stock", "quantity"); drop the "body"/"query" prefix
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    field = ".".join(loc) or "request"
    return f"Invalid field '{field}': {first.get('msg', 'invalid value')}"


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map every failure to the {"msg": ...} envelope with a deterministic status.
    Nothing escapes as an unhandled exception or leaks a stack trace.
    """

    @app.exception_handler(StorefrontError)
    async def _storefront_error(request: Request, exc: StorefrontError):
        return JSONResponse(status_code=exc.status_code, content={"msg": exc.msg})

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"msg": _describe_validation_error(exc)},
        )

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.exception("[error] unhandled exception on %s %s", request.method, request.url.path)
        return await _storefront_error(request, UnexpectedError())


def create_app(settings: Settings = default_settings, *, init_database: bool = True) -> FastAPI:
    """
    Build the application around one Settings instance.

    Services are constructed here, once, and shared through `app.state`;
    route dependencies read them from there.
    """
    app = FastAPI(title=settings.APP_NAME)

    credentials = CredentialService(settings)
    tokens = TokenService(settings)
    app.state.settings = settings
    app.state.credentials = credentials
    app.state.tokens = tokens
    app.state.accounts = AccountService(settings, credentials, tokens)
    app.state.query_builder = CatalogQueryBuilder(settings, CategoryResolver())
    app.state.paginator = PaginationEngine()
    app.state.products = ProductService()

    # CORS (with Cookie)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    if init_database:
        @app.on_event("startup")
        async def on_startup():
            await init_db(settings.database_url)
            # Ensure there's a default admin account on first run
            await ensure_default_admin(settings, credentials)
            logger.info("[startup] %s ready (env=%s)", settings.APP_NAME, settings.env)

        @app.on_event("shutdown")
        async def on_shutdown():
            await close_db()

    # REST
    app.include_router(account.router, prefix="/api/v1")
    app.include_router(products.router, prefix="/api/v1")

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    return app


app = create_app()
