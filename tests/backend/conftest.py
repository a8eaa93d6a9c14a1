import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

TEST_DB_URL = "sqlite://:memory:"
os.environ["DATABASE_URL"] = TEST_DB_URL

from storefront.config import Settings  # noqa: E402
from storefront.core.db import build_tortoise_config  # noqa: E402
from storefront.core.security import Claims  # noqa: E402
from storefront.main import create_app  # noqa: E402
from storefront.models import Category, Product, User  # noqa: E402

TEST_SETTINGS = Settings(
    env="test",
    database_url=TEST_DB_URL,
    jwt_secret="test-secret-0123456789-abcdefghijklmnop",
    access_token_expire_minutes=60,
    argon2_memory_cost=8192,
    argon2_time_cost=2,
    default_role="user",
    product_write_role="admin",
    default_per_page=10,
    max_per_page=100,
    admin_password=None,
)

app = create_app(TEST_SETTINGS, init_database=False)


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    await Tortoise.init(config=build_tortoise_config(TEST_DB_URL))
    await Tortoise.generate_schemas()


@pytest.fixture
def test_app():
    """The FastAPI app under test; dependency overrides are cleared afterwards."""
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def settings():
    return TEST_SETTINGS


@pytest_asyncio.fixture
async def db():
    """Fresh database without an HTTP client (service-level tests)."""
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client(db, test_app):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB.
    """
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def create_user(db):
    """
    Factory fixture to create users directly via ORM (role selectable).
    """

    async def _create_user(role: str = "user", password: str = "UserPass!23") -> tuple[User, str]:
        suffix = uuid.uuid4().hex[:6]
        user = await User.create(
            fullname=f"Test {role}",
            username=f"{role}_{suffix}",
            email=f"{role}_{suffix}@example.com",
            password_hash=app.state.credentials.hash(password),
            role=role,
        )
        return user, password

    return _create_user


@pytest.fixture
def token_for():
    """Issue a token for a user with the app's own TokenService (role claim included)."""

    def _token_for(user: User, with_role: bool = True) -> dict[str, str]:
        claims = Claims(
            username=user.username,
            email=user.email,
            user_id=str(user.id),
            role=user.role if with_role else None,
        )
        return {"Authorization": f"Bearer {app.state.tokens.issue(claims)}"}

    return _token_for


@pytest_asyncio.fixture
async def admin_headers(create_user, token_for):
    admin, _ = await create_user(role="admin")
    return token_for(admin)


@pytest_asyncio.fixture
async def user_headers(create_user, token_for):
    user, _ = await create_user(role="user")
    return token_for(user)


@pytest_asyncio.fixture
async def create_category(db):
    async def _create_category(slug: str, name: str | None = None) -> Category:
        return await Category.create(slug=slug, name=name or slug.title())

    return _create_category


@pytest_asyncio.fixture
async def create_product(db):
    """
    Factory fixture to insert products directly, bypassing the API.
    """

    async def _create_product(title: str = "Phone", category: Category | None = None, **fields) -> Product:
        data = {
            "title": title,
            "short_desc": f"{title} short description",
            "slug": title.replace(" ", "-"),
            "image_url": "https://img.example.com/p.jpg",
            "stock_quantity": 10,
            "stock_remain": 10,
        }
        data.update(fields)
        return await Product.create(category=category, **data)

    return _create_product
