"""Bazaar Ordering FastAPI application.

Processes cart, checkout, order and payment commands synchronously via HTTP.
Each request runs inside the Ordering domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay in ordering/domain.toml:
#   - "test"       → in-memory database
#   - "production" → PostgreSQL via DATABASE_URL
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import DomainContextMiddleware

from ordering.domain import ordering
from ordering.utils.logging import bind_request_context

ordering.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Bazaar Ordering API",
    description="Multi-store marketplace ordering: carts, checkout, orders and payments",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    DomainContextMiddleware,
    route_domain_map={
        "/cart": ordering,
        "/orders": ordering,
        "/admin/orders": ordering,
        "/store-owner": ordering,
        "/payments": ordering,
    },
)

# ---------------------------------------------------------------------------
# Routers and error handling
# ---------------------------------------------------------------------------
from ordering.api.errors import register_error_handlers  # noqa: E402
from ordering.api.routes import (  # noqa: E402
    admin_order_router,
    cart_router,
    order_router,
    payment_router,
    store_owner_router,
)

app.include_router(cart_router)
app.include_router(order_router)
app.include_router(admin_order_router)
app.include_router(store_owner_router)
app.include_router(payment_router)

register_error_handlers(app)


@app.middleware("http")
async def request_log_context(request: Request, call_next):
    bind_request_context(
        request_id=request.headers.get("x-request-id") or uuid4().hex,
        method=request.method,
        path=request.url.path,
        user_id=request.headers.get("x-user-id"),
    )
    return await call_next(request)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "ordering": {"name": ordering.name},
            },
        }
    )
