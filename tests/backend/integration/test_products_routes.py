import pytest

from storefront.api.v1.deps import get_pagination_engine
from storefront.models.product import Product
from storefront.schemas.catalog import ListingOptions
from storefront.services.pagination import PaginationEngine

pytestmark = pytest.mark.asyncio


def _product_body(category_id: str, **overrides):
    body = {
        "category": category_id,
        "title": "iPhone 14",
        "shortDesc": "Ceramic Shield front, glass back and aluminum design",
        "longDesc": "Long description",
        "stock": {"quantity": 10},
        "color": ["red", "black"],
        "price": 400000,
        "image_url": "https://img.example.com/iphone14.jpg",
        "gallery_image": ["https://img.example.com/1.jpg", "https://img.example.com/2.jpg"],
    }
    body.update(overrides)
    return body


class SpyPaginator:
    def __init__(self):
        self.calls = 0

    async def paginate(self, query, options):
        self.calls += 1
        raise AssertionError("product collection must not be queried")


# ============================================================================
# Create
# ============================================================================

async def test_admin_creates_product(client, admin_headers, create_category):
    category = await create_category("phones")
    resp = await client.post("/api/v1/products", headers=admin_headers,
                             json=_product_body(str(category.id)))
    assert resp.status_code == 201
    body = resp.json()
    assert body["msg"] == "Product created successfully"
    data = body["data"]
    assert data["slug"] == "iPhone-14"
    assert data["stock"] == {"quantity": 10, "remain": 10}
    assert data["category"] == str(category.id)
    assert data["gallery_image"] == ["https://img.example.com/1.jpg", "https://img.example.com/2.jpg"]
    assert data["total_selling"] == 0
    assert data["isDeleted"] is False


async def test_create_requires_authentication(client, create_category):
    category = await create_category("phones")
    resp = await client.post("/api/v1/products", json=_product_body(str(category.id)))
    assert resp.status_code == 401


async def test_unauthenticated_gets_401_even_with_invalid_body(client):
    """Authentication precedes both authorization and body validation."""
    resp = await client.post("/api/v1/products", json={"title": ""})
    assert resp.status_code == 401


async def test_unreadable_body_is_400_before_authentication(client, user_headers):
    """A body that is not JSON is rejected while reading the request, ahead of the gates."""
    anonymous = await client.post("/api/v1/products", content=b"{not json",
                                  headers={"Content-Type": "application/json"})
    plain_user = await client.post("/api/v1/products", content=b"{not json",
                                   headers={**user_headers, "Content-Type": "application/json"})
    assert anonymous.status_code == 400
    assert plain_user.status_code == 400
    assert set(anonymous.json()) == {"msg"}


async def test_plain_user_gets_403_even_with_invalid_body(client, user_headers):
    resp = await client.post("/api/v1/products", headers=user_headers, json={"title": ""})
    assert resp.status_code == 403


async def test_create_forbidden_for_plain_user(client, user_headers, create_category):
    category = await create_category("phones")
    resp = await client.post("/api/v1/products", headers=user_headers,
                             json=_product_body(str(category.id)))
    assert resp.status_code == 403
    assert resp.json() == {"msg": "You do not have permission to perform this action"}


async def test_create_forbidden_without_role_claim(client, create_user, token_for, create_category):
    """Signup tokens carry no role claim; they cannot pass a role gate."""
    admin, _ = await create_user(role="admin")
    category = await create_category("phones")
    resp = await client.post("/api/v1/products", headers=token_for(admin, with_role=False),
                             json=_product_body(str(category.id)))
    assert resp.status_code == 403


async def test_create_schema_failure_is_400(client, admin_headers, create_category):
    category = await create_category("phones")
    body = _product_body(str(category.id))
    del body["title"]
    resp = await client.post("/api/v1/products", headers=admin_headers, json=body)
    assert resp.status_code == 400
    assert "title" in resp.json()["msg"]
    assert set(resp.json()) == {"msg"}


async def test_create_rejects_remain_above_quantity(client, admin_headers, create_category):
    category = await create_category("phones")
    resp = await client.post("/api/v1/products", headers=admin_headers,
                             json=_product_body(str(category.id), stock={"quantity": 3, "remain": 5}))
    assert resp.status_code == 400
    assert await Product.all().count() == 0


async def test_create_rejects_unknown_category(client, admin_headers):
    resp = await client.post("/api/v1/products", headers=admin_headers,
                             json=_product_body("not-a-category"))
    assert resp.status_code == 400
    assert resp.json() == {"msg": "Category not found"}


# ============================================================================
# List
# ============================================================================

async def test_list_empty_collection_is_404(client):
    resp = await client.get("/api/v1/products")
    assert resp.status_code == 404
    assert resp.json() == {"msg": "The server not found any resources."}


async def test_list_returns_page_with_metadata(client, create_product):
    for i in range(25):
        await create_product(title=f"Item {i}", price=i)

    first = await client.get("/api/v1/products")
    assert first.status_code == 200
    page = first.json()["data"]
    assert first.json()["msg"] == "The product list"
    assert len(page["itemsList"]) == 10
    assert page["itemCount"] == 25
    assert page["pageCount"] == 3
    assert page["hasPrevPage"] is False
    assert page["hasNextPage"] is True
    assert page["prev"] is None
    assert page["next"] == 2
    assert page["slNo"] == 1

    last = (await client.get("/api/v1/products", params={"page": "3"})).json()["data"]
    assert len(last["itemsList"]) == 5
    assert last["hasNextPage"] is False
    assert last["next"] is None
    assert last["slNo"] == 21


async def test_list_page_past_end_is_404(client, create_product):
    await create_product()
    resp = await client.get("/api/v1/products", params={"page": "5"})
    assert resp.status_code == 404


@pytest.mark.parametrize("params", [
    {"page": "99999999999999999999999"},
    {"page": "9223372036854775807", "perpage": "100"},
])
async def test_list_huge_page_is_404(client, create_product, params):
    await create_product()
    resp = await client.get("/api/v1/products", params=params)
    assert resp.status_code == 404
    assert resp.json() == {"msg": "The server not found any resources."}


async def test_paginate_past_end_returns_empty_page(db, create_product):
    await create_product()
    options = ListingOptions(page=10 ** 20, per_page=100)
    page = await PaginationEngine().paginate({"is_deleted": False}, options)
    assert page.itemsList == []
    assert page.itemCount == 1
    assert page.hasNextPage is False


async def test_list_default_sort_is_price_desc(client, create_product):
    for price in (300, 100, 200):
        await create_product(title=f"P{price}", price=price)

    desc = (await client.get("/api/v1/products")).json()["data"]["itemsList"]
    asc = (await client.get("/api/v1/products", params={"sort": "asc"})).json()["data"]["itemsList"]
    assert [p["price"] for p in desc] == [300, 200, 100]
    assert [p["price"] for p in asc] == [100, 200, 300]


async def test_list_unknown_sort_by_falls_back_to_price(client, create_product):
    await create_product(title="cheap", price=1, total_selling=99)
    await create_product(title="pricey", price=99, total_selling=1)

    unknown = (await client.get("/api/v1/products", params={"sortBy": "password_hash"})).json()
    selling = (await client.get("/api/v1/products", params={"sortBy": "selling"})).json()
    assert [p["title"] for p in unknown["data"]["itemsList"]] == ["pricey", "cheap"]
    assert [p["title"] for p in selling["data"]["itemsList"]] == ["cheap", "pricey"]


async def test_list_title_search_is_case_insensitive(client, create_product):
    await create_product(title="iPhone 14")
    await create_product(title="Galaxy S23")

    resp = await client.get("/api/v1/products", params={"title": "IPHONE"})
    items = resp.json()["data"]["itemsList"]
    assert [p["title"] for p in items] == ["iPhone 14"]


async def test_list_filters_by_category_slug(client, create_category, create_product):
    phones = await create_category("phones")
    laptops = await create_category("laptops")
    await create_product(title="Pixel", category=phones)
    await create_product(title="ThinkPad", category=laptops)

    resp = await client.get("/api/v1/products", params={"category": "laptops"})
    assert resp.status_code == 200
    assert [p["title"] for p in resp.json()["data"]["itemsList"]] == ["ThinkPad"]


async def test_list_unknown_category_is_404_without_querying_products(client, test_app, create_product):
    await create_product()
    spy = SpyPaginator()
    test_app.dependency_overrides[get_pagination_engine] = lambda: spy

    resp = await client.get("/api/v1/products", params={"category": "unknown-slug"})
    assert resp.status_code == 404
    assert resp.json() == {"msg": "Server not found any resources."}
    assert spy.calls == 0


async def test_list_excludes_soft_deleted_and_hides_flag(client, create_product):
    await create_product(title="Visible")
    await create_product(title="Gone", is_deleted=True)

    resp = await client.get("/api/v1/products")
    items = resp.json()["data"]["itemsList"]
    assert [p["title"] for p in items] == ["Visible"]
    assert all("isDeleted" not in p for p in items)
    assert resp.json()["data"]["itemCount"] == 1


async def test_list_perpage_and_bad_values(client, create_product):
    for i in range(4):
        await create_product(title=f"Item {i}", price=i)

    resp = await client.get("/api/v1/products",
                            params={"perpage": "3", "page": "abc", "sort": "weird"})
    page = resp.json()["data"]
    assert resp.status_code == 200
    assert page["perPage"] == 3
    assert page["page"] == 1
    assert page["pageCount"] == 2
    assert [p["price"] for p in page["itemsList"]] == [3, 2, 1]


# ============================================================================
# Update
# ============================================================================

async def test_patch_requires_id(client, admin_headers):
    resp = await client.patch("/api/v1/products", headers=admin_headers, json={"title": "x"})
    assert resp.status_code == 400
    assert resp.json() == {"msg": "Missing product id"}


async def test_patch_unauthenticated_is_401_not_403(client, create_product):
    product = await create_product()
    resp = await client.patch("/api/v1/products", json={"id": str(product.id), "price": 1})
    assert resp.status_code == 401


async def test_patch_forbidden_for_plain_user(client, user_headers, create_product):
    product = await create_product()
    resp = await client.patch("/api/v1/products", headers=user_headers,
                              json={"id": str(product.id), "price": 1})
    assert resp.status_code == 403


async def test_patch_updates_only_given_fields(client, admin_headers, create_product):
    product = await create_product(title="Old title", price=10, color=["red"])

    resp = await client.patch("/api/v1/products", headers=admin_headers,
                              json={"id": str(product.id), "price": 20, "longDesc": None})
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["price"] == 20
    assert data["title"] == "Old title"
    assert data["color"] == ["red"]
    assert data["slug"] == "Old-title"


async def test_patch_title_keeps_slug(client, admin_headers, create_product):
    product = await create_product(title="First")
    resp = await client.patch("/api/v1/products", headers=admin_headers,
                              json={"id": str(product.id), "title": "Second"})
    assert resp.json()["data"]["title"] == "Second"
    assert resp.json()["data"]["slug"] == "First"


async def test_patch_rejects_remain_above_quantity(client, admin_headers, create_product):
    product = await create_product(stock_quantity=5, stock_remain=5)

    bad = await client.patch("/api/v1/products", headers=admin_headers,
                             json={"id": str(product.id), "stock": {"remain": 6}})
    assert bad.status_code == 400

    ok = await client.patch("/api/v1/products", headers=admin_headers,
                            json={"id": str(product.id), "stock": {"quantity": 8, "remain": 6}})
    assert ok.status_code == 200
    assert ok.json()["data"]["stock"] == {"quantity": 8, "remain": 6}


@pytest.mark.parametrize("field", ["title", "shortDesc", "image_url"])
async def test_patch_cannot_blank_required_text(client, admin_headers, create_product, field):
    product = await create_product(title="Keeper")
    resp = await client.patch("/api/v1/products", headers=admin_headers,
                              json={"id": str(product.id), field: ""})
    assert resp.status_code == 400
    assert field in resp.json()["msg"]
    await product.refresh_from_db()
    assert product.title == "Keeper"
    assert product.short_desc == "Keeper short description"
    assert product.image_url == "https://img.example.com/p.jpg"


async def test_patch_soft_delete_hides_from_listing(client, admin_headers, create_product):
    product = await create_product(title="Soon gone")
    resp = await client.patch("/api/v1/products", headers=admin_headers,
                              json={"id": str(product.id), "isDeleted": True})
    assert resp.status_code == 200
    assert resp.json()["data"]["isDeleted"] is True
    assert await Product.filter(id=product.id).exists()

    listing = await client.get("/api/v1/products")
    assert listing.status_code == 404


async def test_patch_unknown_product_is_404(client, admin_headers):
    resp = await client.patch("/api/v1/products", headers=admin_headers,
                              json={"id": "00000000-0000-0000-0000-000000000000", "price": 1})
    assert resp.status_code == 404
    malformed = await client.patch("/api/v1/products", headers=admin_headers,
                                   json={"id": "nope", "price": 1})
    assert malformed.status_code == 404
