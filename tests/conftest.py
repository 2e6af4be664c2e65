from decimal import Decimal

import mongomock
import pytest
from fastapi.testclient import TestClient

from catalog import CatalogStore
from config import Settings
from main import create_app
from order_store import OrderStore
from tests.helpers import FakeProvider, make_product


@pytest.fixture()
def settings():
    return Settings(environment="test", log_level="WARNING", shipping_amount=Decimal("5.00"))


@pytest.fixture()
def db():
    client = mongomock.MongoClient()
    yield client["storefront_test"]
    client.drop_database("storefront_test")


@pytest.fixture()
def catalog(db):
    return CatalogStore(db)


@pytest.fixture()
def order_store(db):
    store = OrderStore(db)
    store.ensure_indexes()
    return store


@pytest.fixture()
def products(catalog):
    """Product A at 10.00, product B at 5.50 and an inactive product."""
    return {
        "A": catalog.create(make_product(name="Linen Shirt", price=Decimal("10.00"), featured=True)),
        "B": catalog.create(make_product(
            name="Style Guide eBook",
            price=Decimal("5.50"),
            category="Digital Products",
            image="https://cdn.example.com/ebook.png",
        )),
        "retired": catalog.create(make_product(name="Old Scarf", price=Decimal("3.00"), is_active=False)),
    }


@pytest.fixture()
def provider():
    return FakeProvider()


@pytest.fixture()
def app(settings, db, provider):
    return create_app(settings, db=db, provider=provider)


@pytest.fixture()
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def unconfigured_client(settings, db):
    with TestClient(create_app(settings, db=db, provider=None)) as client:
        yield client


@pytest.fixture()
def guest_order(client, products):
    response = client.post(
        "/orders",
        json={
            "customer": {"name": "Asha Rao", "email": "Asha@Example.com"},
            "items": [
                {"product": products["A"], "quantity": 2},
                {"product": products["B"], "quantity": 1},
            ],
            "shippingAddress": {"street": "12 MG Road", "city": "Pune", "zip_code": "411001"},
        },
    )
    assert response.status_code == 201
    return response.json()["order"]
