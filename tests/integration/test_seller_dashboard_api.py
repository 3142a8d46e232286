"""
Integration tests for the seller dashboard.
"""

from decimal import Decimal

from sqlalchemy import func, select

from bazaar.api.errors import StorageError
from bazaar.auth.roles import Role
from bazaar.db.models import Product, ProductComment, ProductLike
from tests.conftest import make_product, make_user, sign_in

PRODUCTS_URL = "/api/v1/seller/products"
ONE_MIB = 1_048_576


def product_count(db):
    db.expire_all()
    return db.execute(select(func.count(Product.id))).scalar_one()


def image(size, name="photo.jpg"):
    return {"image": (name, b"\xff" * size, "image/jpeg")}


def test_dashboard_requires_seller_role(client, buyer):
    assert client.get(PRODUCTS_URL).status_code == 401

    sign_in(client, buyer)
    response = client.get(PRODUCTS_URL)
    assert response.status_code == 403
    assert response.json()["error"]["message"] == "You need seller access to view this page."


def test_first_product_is_flagged(client, db_session, seller):
    sign_in(client, seller)

    first = client.post(PRODUCTS_URL, data={"title": "Calculus book", "price": "25"})
    second = client.post(PRODUCTS_URL, data={"title": "Desk", "price": "40", "category": "Rooms"})

    assert first.status_code == 201
    assert first.json()["first_product"] is True
    assert first.json()["message"] == "Congratulations on your first product!"
    assert first.json()["product"]["category"] == "Study Material"
    assert first.json()["product"]["is_available"] is True
    assert first.json()["product"]["is_sponsored"] is False

    assert second.json()["first_product"] is False
    assert second.json()["message"] == "Product created"


def test_price_is_returned_exactly(client, seller):
    sign_in(client, seller)

    response = client.post(PRODUCTS_URL, data={"title": "Kettle", "price": "19.99"})

    price = response.json()["product"]["price"]
    assert isinstance(price, str)
    assert Decimal(price) == Decimal("19.99")


def test_create_with_image_uploads_under_seller_prefix(client, db_session, storage, seller):
    sign_in(client, seller)

    response = client.post(PRODUCTS_URL, data={"title": "Bike", "price": "80"}, files=image(2048))

    assert response.status_code == 201
    bucket, key, size = storage.uploads[0]
    assert bucket == "product_images"
    assert key.startswith(f"{seller.id}/") and key.endswith(".jpg")
    assert size == 2048
    assert response.json()["product"]["image_url"] == (
        f"https://storage.googleapis.com/product_images/{key}"
    )


def test_oversized_image_is_rejected_before_upload(client, db_session, storage, seller):
    sign_in(client, seller)

    response = client.post(
        PRODUCTS_URL, data={"title": "Bike", "price": "80"}, files=image(ONE_MIB + 1)
    )

    assert response.status_code == 413
    assert response.json()["error"]["message"] == "Image must be less than 1MB"
    assert storage.uploads == []
    assert product_count(db_session) == 0


def test_image_at_ceiling_is_accepted(client, storage, seller):
    sign_in(client, seller)
    response = client.post(PRODUCTS_URL, data={"title": "Bike", "price": "80"}, files=image(ONE_MIB))
    assert response.status_code == 201
    assert len(storage.uploads) == 1


def test_storage_failure_preserves_form(client, db_session, storage, seller, monkeypatch):
    def fail(*args, **kwargs):
        raise StorageError("Upload failed: access denied")

    monkeypatch.setattr(storage, "upload", fail)
    sign_in(client, seller)

    response = client.post(
        PRODUCTS_URL, data={"title": "Bike", "price": "80", "description": "Red"}, files=image(10)
    )

    assert response.status_code == 502
    error = response.json()["error"]
    assert error["type"] == "StorageError"
    assert error["details"]["form"]["title"] == "Bike"
    assert error["details"]["form"]["description"] == "Red"
    assert product_count(db_session) == 0


def test_invalid_fields_are_rejected(client, db_session, seller):
    sign_in(client, seller)

    assert client.post(PRODUCTS_URL, data={"title": "   ", "price": "5"}).status_code == 400
    assert client.post(PRODUCTS_URL, data={"title": "Pan", "price": "-1"}).status_code == 422
    assert client.post(PRODUCTS_URL, data={"title": "Pan"}).status_code == 422
    assert client.post(
        PRODUCTS_URL, data={"title": "Pan", "price": "5", "category": "Furniture"}
    ).status_code == 422
    assert product_count(db_session) == 0


def test_list_shows_only_own_products(client, db_session, seller):
    other = make_user(db_session, "other@example.com", [Role.SELLER])
    make_product(db_session, seller, title="Mine")
    make_product(db_session, other, title="Theirs")
    sign_in(client, seller)

    titles = [p["title"] for p in client.get(PRODUCTS_URL).json()]
    assert titles == ["Mine"]


def test_update_own_product(client, db_session, seller):
    product = make_product(db_session, seller, title="Lamp")
    sign_in(client, seller)

    response = client.patch(f"{PRODUCTS_URL}/{product.id}", data={"price": "9.99", "category": "Rooms"})

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Lamp"
    assert Decimal(body["price"]) == Decimal("9.99")
    assert body["category"] == "Rooms"


def test_other_sellers_products_are_not_found(client, db_session, seller):
    other = make_user(db_session, "other@example.com", [Role.SELLER])
    product = make_product(db_session, other, title="Theirs")
    sign_in(client, seller)

    assert client.patch(f"{PRODUCTS_URL}/{product.id}", data={"title": "Mine now"}).status_code == 404
    assert client.post(f"{PRODUCTS_URL}/{product.id}/availability/toggle").status_code == 404
    assert client.delete(f"{PRODUCTS_URL}/{product.id}").status_code == 404

    db_session.expire_all()
    assert db_session.get(Product, product.id).title == "Theirs"


def test_toggle_availability(client, db_session, seller):
    product = make_product(db_session, seller)
    sign_in(client, seller)

    sold = client.post(f"{PRODUCTS_URL}/{product.id}/availability/toggle").json()
    relisted = client.post(f"{PRODUCTS_URL}/{product.id}/availability/toggle").json()

    assert sold["is_available"] is False
    assert relisted["is_available"] is True


def test_delete_removes_likes_and_comments(client, db_session, seller, buyer):
    product = make_product(db_session, seller)
    db_session.add(ProductLike(product_id=product.id, user_id=buyer.id))
    db_session.add(ProductComment(product_id=product.id, seller_id=seller.id, comment_text="hi"))
    db_session.commit()
    product_id = product.id
    sign_in(client, seller)

    response = client.delete(f"{PRODUCTS_URL}/{product_id}")

    assert response.status_code == 204
    assert product_count(db_session) == 0
    assert db_session.execute(select(func.count(ProductLike.id))).scalar_one() == 0
    assert db_session.execute(select(func.count(ProductComment.id))).scalar_one() == 0


def test_admin_can_manage_own_products(client, admin):
    sign_in(client, admin)
    response = client.post(PRODUCTS_URL, data={"title": "Admin item", "price": "1"})
    assert response.status_code == 201
