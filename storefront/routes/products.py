"""Product API routes for the storefront"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from ..core.config import settings
from ..database.products import product_db
from ..errors import DuplicateProduct
from ..models.product import (
    CatalogQuery,
    Category,
    Product,
    ProductCreateRequest,
    ProductListResponse,
    SortBy,
)
from ..services.catalog import list_products

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=ProductListResponse)
async def search_products(
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    category: Optional[str] = Query(None, description="Category slug"),
    search: Optional[str] = Query(None, description="Search text"),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    occasion: Optional[str] = Query(None),
    fabric: Optional[str] = Query(None),
    color: Optional[str] = Query(None),
    size: Optional[str] = Query(None),
    sort_by: SortBy = Query(SortBy.FEATURED, alias="sortBy"),
    in_stock: bool = Query(False, alias="inStock", description="Only show in-stock items"),
):
    """
    List active products with filters, sorting and pagination.

    Malformed parameters are rejected as a whole with a 400.
    """
    query = CatalogQuery(
        page=page,
        limit=limit,
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        occasion=occasion,
        fabric=fabric,
        color=color,
        size=size,
        sort_by=sort_by,
        in_stock=in_stock,
    )

    try:
        return list_products(product_db, query)
    except Exception:
        logger.exception("Error fetching products")
        raise HTTPException(status_code=500, detail="Failed to fetch products")


@router.get("/categories", response_model=list[Category])
async def list_categories():
    """List all product categories"""
    return product_db.list_categories()


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str):
    """Get an active product by ID or slug"""
    product = product_db.get_active_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("", response_model=Product, status_code=201)
async def create_product(request: ProductCreateRequest):
    """Create a new product"""
    try:
        return product_db.create_product(request)
    except LookupError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DuplicateProduct as e:
        raise HTTPException(status_code=409, detail=str(e))
