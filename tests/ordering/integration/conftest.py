import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api.errors import register_error_handlers
from ordering.api.routes import (
    admin_order_router,
    cart_router,
    order_router,
    payment_router,
    store_owner_router,
)


@pytest.fixture()
def app():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(admin_order_router)
    app.include_router(store_owner_router)
    app.include_router(payment_router)
    register_error_handlers(app)
    return app


@pytest.fixture()
def client(app):
    return TestClient(app, headers={"X-User-Id": "user-001"})


@pytest.fixture()
def catalogue(seed_store, seed_product):
    seed_store("store-a")
    seed_store("store-b", name="Store B")
    seed_product("g1", price=200.0, offer_price=150.0)
    seed_product("a1", price=100.0, store_ids=["store-a"])
    seed_product("b1", price=30.0, store_ids=["store-b"])
