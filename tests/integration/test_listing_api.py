"""
Integration tests for the public listing surface.
"""

import uuid
from decimal import Decimal

from bazaar.api.middleware import get_latency_tracker
from tests.conftest import at, make_carousel_item, make_product


def test_listing_is_newest_first_with_seller_email(client, db_session, seller):
    make_product(db_session, seller, title="Old lamp", created_at=at(2024, 1, 1))
    make_product(db_session, seller, title="New lamp", created_at=at(2024, 3, 1))

    response = client.get("/api/v1/products")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert [p["title"] for p in body["products"]] == ["New lamp", "Old lamp"]
    assert {p["seller_email"] for p in body["products"]} == {"seller@example.com"}


def test_listing_applies_search_category_and_mode(client, db_session, seller):
    make_product(db_session, seller, title="Room near campus", category="Rooms",
                 price=Decimal("300"), created_at=at(2024, 1, 1))
    make_product(db_session, seller, title="Shared room", category="Rooms",
                 price=Decimal("150"), created_at=at(2024, 1, 2))
    make_product(db_session, seller, title="Room heater", category="Kitchen Accessories",
                 created_at=at(2024, 1, 3))
    make_product(db_session, seller, title="Sold room", category="Rooms",
                 is_available=False, created_at=at(2024, 1, 4))

    response = client.get(
        "/api/v1/products",
        params={"search": "ROOM", "category": "Rooms", "mode": "price-low-high"},
    )

    titles = [p["title"] for p in response.json()["products"]]
    assert titles == ["Sold room", "Shared room", "Room near campus"]

    available = client.get("/api/v1/products", params={"category": "Rooms", "mode": "available"})
    assert [p["title"] for p in available.json()["products"]] == ["Shared room", "Room near campus"]


def test_listing_rejects_unknown_category_and_mode(client):
    bad_category = client.get("/api/v1/products", params={"category": "Furniture"})
    assert bad_category.status_code == 400
    assert bad_category.json()["error"]["type"] == "ValueError"

    assert client.get("/api/v1/products", params={"mode": "cheapest"}).status_code == 422


def test_sponsored_listing_is_limited_available_and_newest_first(client, db_session, seller):
    for day in range(1, 9):
        make_product(db_session, seller, title=f"Sponsored {day}", is_sponsored=True,
                     created_at=at(2024, 2, day))
    make_product(db_session, seller, title="Sponsored but sold", is_sponsored=True,
                 is_available=False, created_at=at(2024, 2, 20))
    make_product(db_session, seller, title="Plain", created_at=at(2024, 2, 21))

    response = client.get("/api/v1/products/sponsored")

    assert response.status_code == 200
    titles = [p["title"] for p in response.json()]
    assert titles == [f"Sponsored {day}" for day in range(8, 2, -1)]


def test_carousel_lists_active_items_in_display_order(client, db_session):
    make_carousel_item(db_session, title="Third", display_order=3)
    make_carousel_item(db_session, title="First", display_order=1)
    make_carousel_item(db_session, title="Hidden", display_order=0, is_active=False)
    make_carousel_item(db_session, title="Second", display_order=2)

    response = client.get("/api/v1/carousel")

    assert response.status_code == 200
    assert [item["title"] for item in response.json()] == ["First", "Second", "Third"]


def test_categories(client):
    body = client.get("/api/v1/categories").json()
    assert body["categories"] == [
        "Study Material",
        "Foods",
        "Rooms",
        "Vehicle",
        "Kitchen Accessories",
    ]
    assert body["default"] == "Study Material"


def test_root_health_and_status(client):
    assert client.get("/").json()["endpoints"]["products"] == "/api/v1/products"
    assert client.get("/health").json()["status"] == "healthy"

    response = client.get("/status")
    status_body = response.json()
    assert response.status_code == 200
    assert status_body["components"]["database"]["status"] == "healthy"
    assert status_body["components"]["sessions"]["listeners"] >= 1
    assert "latency_p95_ms" in status_body["performance"]
    assert "X-Request-ID" in response.headers
    assert "X-Response-Time" in response.headers


def test_latency_is_tracked_per_route_template(client, db_session, seller):
    tracker = get_latency_tracker()
    tracker.reset()
    product = make_product(db_session, seller)

    for _ in range(20):
        client.get(f"/api/v1/products/{uuid.uuid4()}/likes")
        client.get(f"/nope/{uuid.uuid4()}")
    client.get(f"/api/v1/products/{product.id}/likes")

    assert tracker.paths() == ["/api/v1/products/{product_id}/likes"]
    assert tracker.get_stats("/api/v1/products/{product_id}/likes")["count"] == 21
    assert tracker.get_stats()["count"] == 41
