"""
Storefront Cart - Main FastAPI Application

Single entry point for the cart API.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.db import close_redis
from storefront.logging import get_logger
from storefront.routers import CartStoreRegistry, router as api_router
from storefront.services.products import close_product_service

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    if not hasattr(app.state, "cart_registry"):
        app.state.cart_registry = CartStoreRegistry()
    yield
    # Shutdown: outstanding cart writes first, then clients
    await app.state.cart_registry.flush_all()
    await close_product_service()
    try:
        await close_redis()
    except Exception as e:
        logger.warning(f"Failed to close Redis client: {e}")


app = FastAPI(
    title="Storefront Cart",
    description="Shopping cart API for the storefront",
    version="1.0.0",
    lifespan=lifespan,
)

# Storefront frontend runs on another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


# ==================== HEALTH CHECK ====================

@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "storefront-cart"}
