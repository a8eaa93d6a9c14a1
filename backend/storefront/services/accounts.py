# storefront/services/accounts.py
"""
Account orchestration: signup, login and profile updates.

Uniqueness of email and username is checked before the insert
(check-then-act, no transaction). Two concurrent signups can both pass
the checks; the unique constraints on the users table then reject the
second insert, and that IntegrityError is reported as the same
ConflictError the checks would have produced.
"""
import logging
from typing import Optional

from tortoise.exceptions import IntegrityError

from storefront.config import Settings
from storefront.core.errors import ConflictError, NotFoundError, Unauthenticated, ValidationError
from storefront.core.security import Claims, CredentialService, TokenService
from storefront.models.user import User

logger = logging.getLogger(__name__)


def _missing(*values: Optional[str]) -> bool:
    return any(v is None or (isinstance(v, str) and not v.strip()) for v in values)


class AccountService:
    def __init__(self, settings: Settings, credentials: CredentialService, tokens: TokenService):
        self._default_role = settings.default_role
        self._credentials = credentials
        self._tokens = tokens

    async def is_email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        qs = User.filter(email=email)
        if exclude_id:
            qs = qs.exclude(id=exclude_id)
        return await qs.exists()

    async def is_username_taken(self, username: str, exclude_id: str | None = None) -> bool:
        qs = User.filter(username=username)
        if exclude_id:
            qs = qs.exclude(id=exclude_id)
        return await qs.exists()

    async def _conflict_from_integrity(self, email: str, username: str,
                                       exclude_id: str | None = None) -> ConflictError:
        # Work out which constraint the concurrent writer beat us on
        if await self.is_email_taken(email, exclude_id=exclude_id):
            return ConflictError("email")
        return ConflictError("username")

    async def signup(self, fullname: Optional[str], username: Optional[str],
                     email: Optional[str], password: Optional[str]) -> str:
        """
        Create a user and return a freshly issued token.

        Raises:
            ValidationError: a required field is missing
            ConflictError("email") / ConflictError("username"): already registered
        """
        if _missing(fullname, username, email, password):
            raise ValidationError("Missing required keys")

        if await self.is_email_taken(email):
            logger.info("[signup] email conflict")
            raise ConflictError("email")
        if await self.is_username_taken(username):
            logger.info("[signup] username conflict for %s", username)
            raise ConflictError("username")

        password_hash = await self._credentials.hash_async(password)
        try:
            user = await User.create(
                fullname=fullname,
                username=username,
                email=email,
                password_hash=password_hash,
                role=self._default_role,
            )
        except IntegrityError:
            logger.info("[signup] lost uniqueness race for %s", username)
            raise await self._conflict_from_integrity(email, username)

        logger.info("[signup] created user id=%s username=%s", user.id, user.username)
        return self._tokens.issue(Claims(username=user.username, email=user.email, user_id=str(user.id)))

    async def login(self, username: Optional[str], password: Optional[str]) -> str:
        """
        Verify credentials (username or email) and issue a token carrying the role claim.
        """
        if _missing(username, password):
            raise ValidationError("Missing required keys")
        user = await User.get_or_none(username=username)
        if not user:
            user = await User.get_or_none(email=username)
        if not user or not await self._credentials.verify_async(password, user.password_hash):
            logger.info("[login] invalid credentials for %s", username)
            raise Unauthenticated("Incorrect username or password")
        return self._tokens.issue(
            Claims(username=user.username, email=user.email, user_id=str(user.id), role=user.role)
        )

    async def get_profile(self, user_id: str) -> User:
        user = await User.get_or_none(id=user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, user_id: str, fields: dict) -> User:
        """
        Partial update of fullname / username / email / password.
        Keys that are absent are left untouched.
        """
        user = await self.get_profile(user_id)

        username = fields.get("username")
        if username and username != user.username:
            if await self.is_username_taken(username, exclude_id=user_id):
                raise ConflictError("username")
            user.username = username

        email = fields.get("email")
        if email and email != user.email:
            if await self.is_email_taken(email, exclude_id=user_id):
                raise ConflictError("email")
            user.email = email

        fullname = fields.get("fullname")
        if fullname:
            user.fullname = fullname

        password = fields.get("password")
        if password:
            user.password_hash = await self._credentials.hash_async(password)

        try:
            await user.save()
        except IntegrityError:
            raise await self._conflict_from_integrity(user.email, user.username, exclude_id=user_id)
        return user
