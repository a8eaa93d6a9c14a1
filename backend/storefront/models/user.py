# storefront/models/user.py
"""
Database model for users.
Represents a customer or staff account: credentials, profile and role.
"""
import uuid
from tortoise import fields, models


class User(models.Model):
    """
    User database model.

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Username and email are unique; signup checks them first, the unique
      constraints catch concurrent signups that slip past the check
    - Role determines access level (user vs admin)
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    fullname = fields.CharField(max_length=256)
    username = fields.CharField(max_length=256, unique=True)
    email = fields.CharField(max_length=256, unique=True)
    password_hash = fields.CharField(max_length=255)  # Argon2 hash, never returned by the API
    role = fields.CharField(max_length=16, default="user")  # "user" (default) or "admin"
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"
