"""Product models for the storefront catalog"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import Field, HttpUrl

from .base import CamelModel


class SortBy(str, Enum):
    FEATURED = "featured"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    NAME = "name"
    NEWEST = "newest"


class Category(CamelModel):
    """Product category"""
    id: str
    name: str
    slug: str


class ProductImage(CamelModel):
    url: str
    alt_text: Optional[str] = None
    sort_order: int = 0


class ProductAttribute(CamelModel):
    name: str
    value: str


class ProductVariant(CamelModel):
    """Size/color variant of a product with its own price and stock"""
    id: str
    name: str
    sku: str
    price: float = Field(gt=0)
    stock_quantity: int = Field(ge=0, default=0)
    color: Optional[str] = None
    size: Optional[str] = None
    image: Optional[str] = None
    is_active: bool = True


class Review(CamelModel):
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None


class Product(CamelModel):
    """Product in the catalog"""
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    base_price: float = Field(gt=0)
    sale_price: Optional[float] = Field(default=None, gt=0)
    sku: str
    stock_quantity: int = Field(ge=0, default=0)
    category: Category
    fabric: Optional[str] = None
    work_type: Optional[str] = None
    origin: Optional[str] = None
    artisan: Optional[str] = None
    occasion: list[str] = []
    search_keywords: Optional[str] = None
    images: list[ProductImage] = []
    attributes: list[ProductAttribute] = []
    variants: list[ProductVariant] = []
    reviews: list[Review] = []
    is_active: bool = True
    is_featured: bool = False
    sales_count: int = 0
    view_count: int = 0
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def effective_price(self) -> float:
        return self.sale_price if self.sale_price is not None else self.base_price

    @property
    def primary_image(self) -> Optional[str]:
        if not self.images:
            return None
        return min(self.images, key=lambda image: image.sort_order).url

    def get_variant(self, variant_id: str) -> Optional[ProductVariant]:
        return next((v for v in self.variants if v.id == variant_id), None)


class ProductImageIn(CamelModel):
    url: HttpUrl
    alt_text: Optional[str] = None
    sort_order: Optional[int] = None


class ProductVariantIn(CamelModel):
    name: str
    sku: str
    price: float = Field(gt=0)
    stock_quantity: int = Field(ge=0)
    color: Optional[str] = None
    size: Optional[str] = None
    image: Optional[str] = None


class ProductCreateRequest(CamelModel):
    """Request to add a product to the catalog"""
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    description: Optional[str] = None
    short_description: Optional[str] = None
    base_price: float = Field(gt=0)
    sale_price: Optional[float] = Field(default=None, gt=0)
    sku: str = Field(min_length=1)
    stock_quantity: int = Field(ge=0)
    category_id: str
    fabric: Optional[str] = None
    work_type: Optional[str] = None
    origin: Optional[str] = None
    artisan: Optional[str] = None
    occasion: Optional[list[str]] = None
    images: Optional[list[ProductImageIn]] = None
    attributes: Optional[list[ProductAttribute]] = None
    variants: Optional[list[ProductVariantIn]] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    search_keywords: Optional[str] = None
    is_featured: Optional[bool] = None


class VariantSummary(CamelModel):
    id: str
    name: str
    price: float
    stock_quantity: int
    color: Optional[str] = None
    size: Optional[str] = None
    image: Optional[str] = None


class ProductSummary(CamelModel):
    """Shaped product for listing responses"""
    id: str
    name: str
    slug: str
    short_description: Optional[str] = None
    base_price: float
    sale_price: Optional[float] = None
    effective_price: float
    has_discount: bool
    discount_percentage: int
    stock_quantity: int
    sku: str
    fabric: Optional[str] = None
    work_type: Optional[str] = None
    origin: Optional[str] = None
    occasion: list[str] = []
    is_featured: bool
    category: Category
    image: str
    variants: list[VariantSummary] = []
    average_rating: float
    review_count: int
    created_at: datetime
    updated_at: datetime


class CatalogQuery(CamelModel):
    """Validated catalog listing parameters"""
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=12, ge=1)
    category: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[float] = Field(default=None, ge=0)
    max_price: Optional[float] = Field(default=None, ge=0)
    occasion: Optional[str] = None
    fabric: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    sort_by: SortBy = SortBy.FEATURED
    in_stock: bool = False


class Pagination(CamelModel):
    page: int
    limit: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


class CatalogFilters(CamelModel):
    """Filters echoed back to the caller"""
    category: Optional[str] = None
    search: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    occasion: Optional[str] = None
    fabric: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    sort_by: SortBy
    in_stock: bool


class ProductListResponse(CamelModel):
    """Response from product listing"""
    products: list[ProductSummary]
    pagination: Pagination
    filters: CatalogFilters


def product_fields(request: ProductCreateRequest) -> dict[str, Any]:
    """Plain product fields of a create request, without nested collections"""
    return request.model_dump(
        exclude={"category_id", "images", "attributes", "variants", "occasion", "is_featured"},
    )
