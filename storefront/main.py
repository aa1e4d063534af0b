"""
Storefront Application

Catalog, checkout and cart sync API for the GlamorousDesi storefront.
"""

import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "config", ".env"))

from .core.config import settings
from .routes import products_router, cart_router, checkout_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Storefront starting up...")
    logger.info(f"Payment provider: {settings.payment_provider}")
    logger.info(f"Stock reservation on checkout: {settings.reserve_stock_on_checkout}")
    yield
    logger.info("Storefront shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Catalog, cart sync and checkout API for Indian bridal and festive wear",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict this
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed input is a client error: 400 with the validation details"""
    logger.info(f"Rejected {request.method} {request.url.path}: {len(exc.errors())} errors")
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Invalid request parameters",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


# Include API routers
app.include_router(products_router)
app.include_router(cart_router)
app.include_router(checkout_router)


@app.get("/")
async def home():
    """API index"""
    return {
        "message": "GlamorousDesi Storefront API",
        "docs": "/docs",
        "endpoints": {
            "products": "/api/products",
            "cart": "/api/cart",
            "checkout": "/api/checkout",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "storefront",
        "payment_provider": settings.payment_provider,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
