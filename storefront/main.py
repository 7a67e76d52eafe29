import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.config import settings
from storefront.database import create_db_and_tables
from storefront.errors import StoreError
from storefront.logging_config import configure_logging
from storefront.routes import admin_orders, cart, health, inventory, orders

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.env == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Storefront Orders API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(cart.router, prefix="/cart", tags=["Cart"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(admin_orders.router, prefix="/admin/orders", tags=["Admin Orders"])
app.include_router(inventory.router, prefix="/admin/inventory", tags=["Admin Inventory"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "cart": [
            "/cart", "/cart/add", "/cart/update/{product_id}",
            "/cart/remove/{product_id}", "/cart/clear"
        ],
        "orders": [
            "/orders", "/orders/{order_id}", "/orders/number/{order_number}",
            "/orders/{order_id}/timeline", "/orders/{order_id}/cancel"
        ],
        "admin_orders": [
            "/admin/orders", "/admin/orders/{order_id}",
            "/admin/orders/{order_id}/status", "/admin/orders/{order_id}/payment"
        ],
        "admin_inventory": [
            "/admin/inventory/summary", "/admin/inventory/{product_id}/restock"
        ],
    }
