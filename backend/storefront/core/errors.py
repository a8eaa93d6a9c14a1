# storefront/core/errors.py
"""
Error taxonomy shared by services and the HTTP boundary.

Services raise these; `storefront.main` registers one exception handler that
turns any of them into the `{"msg": ...}` envelope with the matching status.
"""
from fastapi import status


class StorefrontError(Exception):
    """Base class for every handled error. Carries its HTTP status and a user-facing message."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_msg: str = "Internal server error"

    def __init__(self, msg: str | None = None):
        self.msg = msg or self.default_msg
        super().__init__(self.msg)


class ValidationError(StorefrontError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_msg = "Invalid request"


class ConflictError(StorefrontError):
    """A unique field (email, username) is already taken."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, field: str, msg: str | None = None):
        self.field = field
        super().__init__(msg or f"{field.capitalize()} already exist, please try another one!")


class Unauthenticated(StorefrontError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_msg = "Unauthorized"


class Forbidden(StorefrontError):
    status_code = status.HTTP_403_FORBIDDEN
    default_msg = "Forbidden"


class NotFoundError(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    default_msg = "Server not found any resources."


class UnexpectedError(StorefrontError):
    """Anything not covered above. Its message never carries internals."""


# ---- token failures (raised by TokenService, mapped to Unauthenticated by deps) ----
class TokenError(Exception):
    pass


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    pass
