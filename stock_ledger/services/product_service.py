from sqlalchemy import func
from typing import Optional, List
import math
import logging

from stock_ledger.models.company import Company
from stock_ledger.models.product import Product
from stock_ledger.models.production import ProductionHistory
from stock_ledger.models.sale import Sale
from stock_ledger.schemas.product import ProductCreate, ProductUpdate
from stock_ledger.exceptions import (
    CompanyNotFoundError,
    ConflictError,
    ProductNotFoundError,
)
from stock_ledger.services.base import BaseService
from stock_ledger.utils.cache import cache_service

logger = logging.getLogger(__name__)


class ProductService(BaseService):
    """
    Service class for Product CRUD operations.

    This service handles:
    - Creating new products (recording their initial stock)
    - Reading products (with caching)
    - Updating product details (stock is not editable here)
    - Deleting products that have no sales
    - Comparing stored stock with the stock rebuilt from the ledger
    """

    CACHE_PREFIX = "product"

    def create(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        Args:
            product_data: Product creation data

        Returns:
            Created product instance
        """
        db = self._require_db()
        self._check_company(product_data.company_id)

        with self._transaction():
            product = Product(
                name=product_data.name,
                description=product_data.description,
                category=product_data.category,
                size=product_data.size,
                cost_price=product_data.cost_price,
                sale_price=product_data.sale_price,
                stock_quantity=product_data.stock_quantity,
                initial_stock=product_data.stock_quantity,
                company_id=product_data.company_id,
            )
            db.add(product)

        db.refresh(product)
        logger.info(f"Product #{product.id} created with stock {product.stock_quantity}")
        return product

    def get_by_id(self, product_id: int) -> Product:
        """
        Get a product by ID.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        db = self._require_db()
        product = db.query(Product).filter(Product.id == product_id).first()

        if not product:
            raise ProductNotFoundError(product_id)

        return product

    def get_by_id_cached(self, product_id: int) -> dict:
        """
        Get product details from cache or database.
        Returns a dictionary (suitable for API response).

        Only this path fills the cache. The entry is best-effort: a snapshot
        read just before a concurrent stock change commits can be written
        after that change invalidated the key, and then lives until
        CACHE_TTL expires. Stock decisions always read the locked row.
        """
        cached = cache_service.get(self.CACHE_PREFIX, str(product_id))
        if cached:
            return cached

        product = self.get_by_id(product_id)
        self._cache_product(product)
        return self._product_dict(product)

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str = None,
        category: str = None,
    ) -> tuple[List[Product], int, int]:
        """
        Get paginated list of products.

        Args:
            page: Page number (1-indexed)
            page_size: Number of items per page
            search: Optional search term for product name
            category: Optional exact category filter

        Returns:
            Tuple of (products list, total count, total pages)
        """
        db = self._require_db()
        query = db.query(Product)

        if search:
            query = query.filter(Product.name.ilike(f"%{search}%"))
        if category:
            query = query.filter(Product.category == category)

        total = query.count()
        total_pages = math.ceil(total / page_size) if total > 0 else 1

        offset = (page - 1) * page_size
        products = query.order_by(Product.id.desc()).offset(offset).limit(page_size).all()

        return products, total, total_pages

    def update(self, product_id: int, product_data: ProductUpdate) -> Product:
        """
        Update an existing product. Only non-None fields are updated.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        db = self._require_db()
        update_data = product_data.model_dump(exclude_unset=True)
        if update_data.get("company_id") is not None:
            self._check_company(update_data["company_id"])

        with self._transaction():
            product = db.query(Product).filter(Product.id == product_id).first()
            if not product:
                raise ProductNotFoundError(product_id)

            for field, value in update_data.items():
                if value is not None or field == "company_id":
                    setattr(product, field, value)

        db.refresh(product)
        self._invalidate_cache(product_id)
        return product

    def delete(self, product_id: int) -> None:
        """
        Delete a product together with its production history.

        Products with sales cannot be deleted, so the sale history
        stays complete.

        Raises:
            ProductNotFoundError: If product doesn't exist
            ConflictError: If the product has sales
        """
        db = self._require_db()

        with self._transaction():
            product = (
                db.query(Product)
                .filter(Product.id == product_id)
                .with_for_update()
                .first()
            )
            if not product:
                raise ProductNotFoundError(product_id)

            sales_count = db.query(func.count(Sale.id)).filter(Sale.product_id == product_id).scalar()
            if sales_count:
                raise ConflictError(
                    f"Product '{product.name}' has {sales_count} sale(s) and cannot be deleted"
                )

            db.delete(product)

        self._invalidate_cache(product_id)
        logger.info(f"Product #{product_id} deleted")

    def low_stock(self, threshold: int) -> List[Product]:
        """Products with stock strictly below the threshold, lowest first."""
        db = self._require_db()
        return (
            db.query(Product)
            .filter(Product.stock_quantity < threshold)
            .order_by(Product.stock_quantity.asc(), Product.id.asc())
            .all()
        )

    def ledger_balance(self, product_id: int) -> dict:
        """
        Rebuild a product's stock from its ledger.

        expected = initial stock + total produced - total sold
        """
        product = self.get_by_id(product_id)
        return self._balance(product)

    def ledger_balances(self) -> List[dict]:
        db = self._require_db()
        return [self._balance(p) for p in db.query(Product).order_by(Product.id).all()]

    def _balance(self, product: Product) -> dict:
        db = self.db
        produced = (
            db.query(func.coalesce(func.sum(ProductionHistory.quantity), 0))
            .filter(ProductionHistory.product_id == product.id)
            .scalar()
        )
        sold = (
            db.query(func.coalesce(func.sum(Sale.quantity), 0))
            .filter(Sale.product_id == product.id)
            .scalar()
        )
        expected = product.initial_stock + int(produced) - int(sold)
        return {
            "product_id": product.id,
            "initial_stock": product.initial_stock,
            "total_produced": int(produced),
            "total_sold": int(sold),
            "expected_stock": expected,
            "stock_quantity": product.stock_quantity,
            "consistent": expected == product.stock_quantity,
        }

    def _check_company(self, company_id: Optional[int]) -> None:
        if company_id is None:
            return
        exists = self.db.query(Company.id).filter(Company.id == company_id).first()
        if not exists:
            raise CompanyNotFoundError(company_id)

    def _product_dict(self, product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "description": product.description,
            "category": product.category,
            "size": product.size,
            "cost_price": float(product.cost_price),
            "sale_price": float(product.sale_price),
            "stock_quantity": product.stock_quantity,
            "initial_stock": product.initial_stock,
            "company_id": product.company_id,
            "created_at": str(product.created_at),
            "updated_at": str(product.updated_at),
        }

    def _cache_product(self, product: Product) -> None:
        """Cache a product instance."""
        cache_service.set(self.CACHE_PREFIX, str(product.id), self._product_dict(product))

    def _invalidate_cache(self, product_id: int) -> None:
        """Invalidate cache for a product."""
        cache_service.delete(self.CACHE_PREFIX, str(product_id))
