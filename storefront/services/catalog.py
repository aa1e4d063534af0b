"""Catalog query service: shapes product listings and pagination"""

import math

from ..database.products import ProductDatabase
from ..models.product import (
    CatalogFilters,
    CatalogQuery,
    Pagination,
    Product,
    ProductListResponse,
    ProductSummary,
    VariantSummary,
)
from .pricing import average_rating, discount_percentage

PLACEHOLDER_IMAGE = "/images/placeholder-product.jpg"


def summarize_product(product: Product) -> ProductSummary:
    """Listing view of a product; never exposes the stored record itself"""
    variants = sorted(
        (v for v in product.variants if v.is_active),
        key=lambda v: v.price,
    )
    return ProductSummary(
        id=product.id,
        name=product.name,
        slug=product.slug,
        short_description=product.short_description,
        base_price=product.base_price,
        sale_price=product.sale_price,
        effective_price=product.effective_price,
        has_discount=product.sale_price is not None,
        discount_percentage=discount_percentage(product.base_price, product.sale_price),
        stock_quantity=product.stock_quantity,
        sku=product.sku,
        fabric=product.fabric,
        work_type=product.work_type,
        origin=product.origin,
        occasion=product.occasion,
        is_featured=product.is_featured,
        category=product.category,
        image=product.primary_image or PLACEHOLDER_IMAGE,
        variants=[
            VariantSummary(
                id=v.id,
                name=v.name,
                price=v.price,
                stock_quantity=v.stock_quantity,
                color=v.color,
                size=v.size,
                image=v.image,
            )
            for v in variants
        ],
        average_rating=average_rating(r.rating for r in product.reviews),
        review_count=len(product.reviews),
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def build_pagination(page: int, limit: int, total_count: int) -> Pagination:
    total_pages = math.ceil(total_count / limit)
    return Pagination(
        page=page,
        limit=limit,
        total_count=total_count,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )


def list_products(db: ProductDatabase, query: CatalogQuery) -> ProductListResponse:
    """Run a catalog query and shape the page for the API"""
    products, total = db.search_products(query)

    return ProductListResponse(
        products=[summarize_product(p) for p in products],
        pagination=build_pagination(query.page, query.limit, total),
        filters=CatalogFilters(
            **query.model_dump(exclude={"page", "limit"}),
        ),
    )
