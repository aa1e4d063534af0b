"""Product catalog storage"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Iterable, Optional

from ..errors import DuplicateProduct
from ..models.product import (
    CatalogQuery,
    Category,
    Product,
    ProductCreateRequest,
    ProductImage,
    ProductVariant,
    Review,
    SortBy,
    product_fields,
)

logger = logging.getLogger(__name__)

CATEGORIES: dict[str, Category] = {
    "cat-lehenga": Category(id="cat-lehenga", name="Bridal Lehengas", slug="bridal-lehengas"),
    "cat-saree": Category(id="cat-saree", name="Sarees", slug="sarees"),
    "cat-sherwani": Category(id="cat-sherwani", name="Sherwanis", slug="sherwanis"),
    "cat-anarkali": Category(id="cat-anarkali", name="Anarkali Suits", slug="anarkali-suits"),
    "cat-jewelry": Category(id="cat-jewelry", name="Bridal Jewelry", slug="bridal-jewelry"),
}

# Mock product catalog
PRODUCTS: dict[str, Product] = {
    "prod-001": Product(
        id="prod-001",
        name="Crimson Zardozi Bridal Lehenga",
        slug="crimson-zardozi-bridal-lehenga",
        description="Hand-embroidered raw silk lehenga with zardozi and dabka work, paired with a net dupatta.",
        short_description="Raw silk bridal lehenga with zardozi work",
        base_price=2000.00,
        sale_price=1500.00,
        sku="GD-LEH-CRIMSON",
        stock_quantity=4,
        category=CATEGORIES["cat-lehenga"],
        fabric="Raw Silk",
        work_type="Zardozi",
        origin="Lucknow",
        occasion=["WEDDING", "RECEPTION"],
        search_keywords="bridal red lehenga zardozi",
        images=[ProductImage(url="/images/products/crimson-lehenga.jpg", sort_order=0)],
        variants=[
            ProductVariant(id="var-001-s", name="Small", sku="GD-LEH-CRIMSON-S", price=1500.00, stock_quantity=2, color="Red", size="S"),
            ProductVariant(id="var-001-m", name="Medium", sku="GD-LEH-CRIMSON-M", price=1550.00, stock_quantity=1, color="Red", size="M"),
        ],
        reviews=[Review(rating=5), Review(rating=4)],
        is_featured=True,
        sales_count=48,
        view_count=5200,
        created_at=datetime(2024, 1, 10),
        updated_at=datetime(2024, 1, 10),
    ),
    "prod-002": Product(
        id="prod-002",
        name="Ivory Chikankari Lehenga",
        slug="ivory-chikankari-lehenga",
        description="Georgette lehenga with shadow-work chikankari and mirror accents.",
        short_description="Georgette lehenga with chikankari",
        base_price=899.00,
        sku="GD-LEH-IVORY",
        stock_quantity=12,
        category=CATEGORIES["cat-lehenga"],
        fabric="Georgette",
        work_type="Chikankari",
        origin="Lucknow",
        occasion=["MEHNDI", "SANGEET"],
        search_keywords="white lehenga chikan",
        images=[ProductImage(url="/images/products/ivory-lehenga.jpg", sort_order=0)],
        variants=[
            ProductVariant(id="var-002-m", name="Medium", sku="GD-LEH-IVORY-M", price=899.00, stock_quantity=6, color="Ivory", size="M"),
            ProductVariant(id="var-002-l", name="Large", sku="GD-LEH-IVORY-L", price=899.00, stock_quantity=6, color="Ivory", size="L"),
        ],
        reviews=[Review(rating=4), Review(rating=4), Review(rating=5)],
        is_featured=True,
        sales_count=48,
        view_count=3100,
        created_at=datetime(2024, 2, 3),
        updated_at=datetime(2024, 2, 3),
    ),
    "prod-003": Product(
        id="prod-003",
        name="Kanjivaram Silk Saree - Temple Gold",
        slug="kanjivaram-silk-saree-temple-gold",
        description="Pure mulberry silk Kanjivaram with a contrast temple border woven in real zari.",
        short_description="Pure silk Kanjivaram saree",
        base_price=650.00,
        sale_price=520.00,
        sku="GD-SAR-KANJI-GOLD",
        stock_quantity=8,
        category=CATEGORIES["cat-saree"],
        fabric="Mulberry Silk",
        work_type="Zari Weave",
        origin="Kanchipuram",
        occasion=["WEDDING", "FESTIVE"],
        search_keywords="kanjeevaram south indian silk saree",
        images=[ProductImage(url="/images/products/kanjivaram-gold.jpg", sort_order=0)],
        reviews=[Review(rating=5), Review(rating=5), Review(rating=4)],
        sales_count=120,
        view_count=8000,
        created_at=datetime(2024, 3, 15),
        updated_at=datetime(2024, 3, 15),
    ),
    "prod-004": Product(
        id="prod-004",
        name="Banarasi Georgette Saree - Rani Pink",
        slug="banarasi-georgette-saree-rani-pink",
        description="Lightweight Banarasi georgette with floral buti and a scalloped pallu.",
        short_description="Banarasi georgette saree",
        base_price=180.00,
        sku="GD-SAR-BANA-PINK",
        stock_quantity=0,
        category=CATEGORIES["cat-saree"],
        fabric="Georgette",
        work_type="Banarasi Weave",
        origin="Varanasi",
        occasion=["FESTIVE", "SANGEET"],
        images=[ProductImage(url="/images/products/banarasi-pink.jpg", sort_order=0)],
        sales_count=35,
        view_count=1500,
        created_at=datetime(2024, 4, 2),
        updated_at=datetime(2024, 4, 2),
    ),
    "prod-005": Product(
        id="prod-005",
        name="Ivory Raw Silk Sherwani",
        slug="ivory-raw-silk-sherwani",
        description="Raw silk sherwani with resham embroidery, churidar and stole included.",
        short_description="Groom sherwani in raw silk",
        base_price=1100.00,
        sale_price=990.00,
        sku="GD-SHW-IVORY",
        stock_quantity=10,
        category=CATEGORIES["cat-sherwani"],
        fabric="Raw Silk",
        work_type="Resham",
        origin="Jaipur",
        occasion=["WEDDING"],
        images=[ProductImage(url="/images/products/ivory-sherwani.jpg", sort_order=0)],
        variants=[
            ProductVariant(id="var-005-40", name="Chest 40", sku="GD-SHW-IVORY-40", price=990.00, stock_quantity=3, color="Ivory", size="40"),
            ProductVariant(id="var-005-42", name="Chest 42", sku="GD-SHW-IVORY-42", price=990.00, stock_quantity=0, color="Ivory", size="42"),
        ],
        reviews=[Review(rating=4)],
        is_featured=True,
        sales_count=22,
        view_count=2400,
        created_at=datetime(2024, 1, 22),
        updated_at=datetime(2024, 1, 22),
    ),
    "prod-006": Product(
        id="prod-006",
        name="Emerald Velvet Anarkali",
        slug="emerald-velvet-anarkali",
        description="Floor-length velvet anarkali with gota patti yoke.",
        short_description="Velvet anarkali with gota patti",
        base_price=75.00,
        sku="GD-ANK-EMERALD",
        stock_quantity=25,
        category=CATEGORIES["cat-anarkali"],
        fabric="Velvet",
        work_type="Gota Patti",
        origin="Jaipur",
        occasion=["SANGEET", "FESTIVE"],
        images=[ProductImage(url="/images/products/emerald-anarkali.jpg", sort_order=0)],
        variants=[
            ProductVariant(id="var-006-s", name="Small", sku="GD-ANK-EMERALD-S", price=75.00, stock_quantity=10, color="Emerald Green", size="S"),
            ProductVariant(id="var-006-m", name="Medium", sku="GD-ANK-EMERALD-M", price=75.00, stock_quantity=15, color="Emerald Green", size="M"),
        ],
        reviews=[Review(rating=3), Review(rating=4)],
        sales_count=60,
        view_count=900,
        created_at=datetime(2024, 5, 1),
        updated_at=datetime(2024, 5, 1),
    ),
    "prod-007": Product(
        id="prod-007",
        name="Kundan Choker Set",
        slug="kundan-choker-set",
        description="Gold-plated kundan choker with matching jhumkas and maang tikka.",
        short_description="Kundan choker with jhumkas",
        base_price=40.00,
        sku="GD-JWL-KUNDAN",
        stock_quantity=50,
        category=CATEGORIES["cat-jewelry"],
        work_type="Kundan",
        origin="Jaipur",
        occasion=["WEDDING", "RECEPTION", "FESTIVE"],
        images=[ProductImage(url="/images/products/kundan-choker.jpg", sort_order=0)],
        reviews=[Review(rating=5)],
        sales_count=210,
        view_count=4000,
        created_at=datetime(2024, 5, 20),
        updated_at=datetime(2024, 5, 20),
    ),
    "prod-008": Product(
        id="prod-008",
        name="Archived Mirror-Work Lehenga",
        slug="archived-mirror-work-lehenga",
        description="Discontinued style kept for order history.",
        base_price=300.00,
        sku="GD-LEH-MIRROR",
        stock_quantity=5,
        category=CATEGORIES["cat-lehenga"],
        fabric="Cotton Silk",
        occasion=["MEHNDI"],
        is_active=False,
        created_at=datetime(2023, 11, 5),
        updated_at=datetime(2023, 11, 5),
    ),
}


class ProductDatabase:
    """In-memory product database for the storefront"""

    def __init__(self):
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        """Restore the seed catalog"""
        self.categories = {k: c.model_copy(deep=True) for k, c in CATEGORIES.items()}
        self.products = {k: p.model_copy(deep=True) for k, p in PRODUCTS.items()}

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def get_active_product(self, id_or_slug: str) -> Optional[Product]:
        """Get an active product by ID or slug"""
        product = self.products.get(id_or_slug) or next(
            (p for p in self.products.values() if p.slug == id_or_slug),
            None,
        )
        if product and product.is_active:
            return product
        return None

    def find_active(self, product_ids: Iterable[str]) -> dict[str, Product]:
        """Active products among the given IDs, keyed by ID"""
        return {
            pid: self.products[pid]
            for pid in set(product_ids)
            if pid in self.products and self.products[pid].is_active
        }

    def list_categories(self) -> list[Category]:
        return sorted(self.categories.values(), key=lambda c: c.name)

    def search_products(self, query: CatalogQuery) -> tuple[list[Product], int]:
        """
        Filter, sort and page the active catalog.

        Returns:
            Tuple of (products on the requested page, total matching count)
        """
        results = [p for p in self.products.values() if p.is_active]

        # Filter by search text
        if query.search:
            needle = query.search.lower()
            results = [
                p for p in results
                if needle in p.name.lower()
                or needle in (p.description or "").lower()
                or needle in (p.search_keywords or "").lower()
            ]

        if query.category:
            results = [p for p in results if p.category.slug == query.category]

        # Price bounds compare against the effective price
        if query.min_price is not None:
            results = [p for p in results if p.effective_price >= query.min_price]
        if query.max_price is not None:
            results = [p for p in results if p.effective_price <= query.max_price]

        if query.occasion:
            occasion = query.occasion.upper()
            results = [p for p in results if occasion in p.occasion]

        if query.fabric:
            fabric = query.fabric.lower()
            results = [p for p in results if fabric in (p.fabric or "").lower()]

        if query.in_stock:
            results = [p for p in results if p.stock_quantity > 0]

        # Color and size match through active variants
        if query.color or query.size:
            results = [p for p in results if self._has_matching_variant(p, query.color, query.size)]

        total = len(results)

        results = self._sort(results, query.sort_by)

        offset = (query.page - 1) * query.limit
        return results[offset : offset + query.limit], total

    @staticmethod
    def _has_matching_variant(product: Product, color: Optional[str], size: Optional[str]) -> bool:
        for variant in product.variants:
            if not variant.is_active:
                continue
            if color and color.lower() not in (variant.color or "").lower():
                continue
            if size and size.lower() not in (variant.size or "").lower():
                continue
            return True
        return False

    @staticmethod
    def _sort(products: list[Product], sort_by: SortBy) -> list[Product]:
        # ID first so every ordering has a deterministic tie-break
        products = sorted(products, key=lambda p: p.id)

        if sort_by == SortBy.PRICE_ASC:
            products.sort(key=lambda p: p.effective_price)
        elif sort_by == SortBy.PRICE_DESC:
            products.sort(key=lambda p: p.effective_price, reverse=True)
        elif sort_by == SortBy.NAME:
            products.sort(key=lambda p: p.name)
        elif sort_by == SortBy.NEWEST:
            products.sort(key=lambda p: p.created_at, reverse=True)
        else:
            products.sort(key=lambda p: (not p.is_featured, -p.sales_count, -p.view_count))
        return products

    def create_product(self, request: ProductCreateRequest) -> Product:
        """Add a product to the catalog"""
        category = self.categories.get(request.category_id)
        if not category:
            raise LookupError(f"Category {request.category_id} not found")

        with self._lock:
            for existing in self.products.values():
                if existing.slug == request.slug or existing.sku == request.sku:
                    raise DuplicateProduct(
                        f"Product with slug {request.slug} or sku {request.sku} already exists"
                    )

            now = datetime.utcnow()
            product_id = f"prod-{uuid.uuid4().hex[:8]}"
            product = Product(
                id=product_id,
                category=category,
                occasion=[o.upper() for o in request.occasion or []],
                is_featured=bool(request.is_featured),
                images=[
                    ProductImage(
                        url=str(image.url),
                        alt_text=image.alt_text,
                        sort_order=image.sort_order if image.sort_order is not None else index,
                    )
                    for index, image in enumerate(request.images or [])
                ],
                attributes=request.attributes or [],
                variants=[
                    ProductVariant(id=f"var-{uuid.uuid4().hex[:8]}", **variant.model_dump())
                    for variant in request.variants or []
                ],
                created_at=now,
                updated_at=now,
                **product_fields(request),
            )
            self.products[product_id] = product

        logger.info(f"Product {product_id} created: {product.name}")
        return product

    def update_stock(
        self,
        product_id: str,
        quantity_change: int,
        variant_id: Optional[str] = None,
    ) -> bool:
        """
        Update product or variant stock.

        Args:
            product_id: Product to update
            quantity_change: Positive to add, negative to remove
            variant_id: Variant whose stock to update instead of the product's

        Returns:
            True if successful
        """
        with self._lock:
            return self._apply_stock_change(product_id, variant_id, quantity_change)

    def reserve_stock(self, lines: list[tuple[str, Optional[str], int]]) -> bool:
        """
        Atomically decrement stock for every (product_id, variant_id, quantity) line.

        Either all lines are reserved or none are.
        """
        with self._lock:
            applied = []
            for product_id, variant_id, quantity in lines:
                if not self._apply_stock_change(product_id, variant_id, -quantity):
                    for done in reversed(applied):
                        self._apply_stock_change(done[0], done[1], done[2])
                    return False
                applied.append((product_id, variant_id, quantity))
            return True

    def release_stock(self, lines: list[tuple[str, Optional[str], int]]) -> None:
        """Return previously reserved stock"""
        with self._lock:
            for product_id, variant_id, quantity in lines:
                self._apply_stock_change(product_id, variant_id, quantity)

    def _apply_stock_change(
        self, product_id: str, variant_id: Optional[str], quantity_change: int
    ) -> bool:
        product = self.products.get(product_id)
        if not product:
            return False

        target = product.get_variant(variant_id) if variant_id else product
        if target is None:
            return False

        new_quantity = target.stock_quantity + quantity_change
        if new_quantity < 0:
            return False

        target.stock_quantity = new_quantity
        product.updated_at = datetime.utcnow()
        return True


# Singleton instance
product_db = ProductDatabase()
