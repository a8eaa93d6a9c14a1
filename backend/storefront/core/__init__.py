# storefront/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Default admin creation on first startup
- db: Tortoise ORM configuration and connection management
- errors: Error taxonomy mapped to HTTP statuses at the boundary
- security: Password hashing, session tokens, and role ranking
"""
