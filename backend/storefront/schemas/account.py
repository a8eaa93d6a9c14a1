# storefront/schemas/account.py
"""
Pydantic schemas for account endpoints.

Signup/login fields are all optional at the schema level: missing keys are
reported by AccountService as a 400 "Missing required keys" instead of
pydantic's generic validation error.
"""
from typing import Optional
from pydantic import BaseModel


class SignupIn(BaseModel):
    fullname: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginIn(BaseModel):
    username: Optional[str] = None  # Username or email
    password: Optional[str] = None


class ProfileUpdateIn(BaseModel):
    """All fields optional - only provided (non-null) fields are updated."""
    fullname: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

