from sqlalchemy import func
from sqlalchemy.orm import joinedload
from typing import List, Tuple
import logging

from stock_ledger.models.product import Product
from stock_ledger.models.production import ProductionHistory
from stock_ledger.schemas.production import ProductionCreate
from stock_ledger.exceptions import InvalidQuantityError, ProductNotFoundError
from stock_ledger.services.base import BaseService
from stock_ledger.utils.cache import cache_service
from stock_ledger.utils.dates import force_date_without_timezone, utc_today

logger = logging.getLogger(__name__)


class ProductionService(BaseService):
    """
    Service class for in-house production (restock) entries.

    Every entry increments the product stock and appends a history row in
    the same transaction, under the same product row lock used by sales.
    """

    CACHE_PREFIX = "product"
    TOP_PRODUCTION_LIMIT = 10

    def record_production(
        self, product_id: int, production_data: ProductionCreate
    ) -> Tuple[Product, ProductionHistory]:
        """
        Add produced units to a product's stock.

        Args:
            product_id: Product that was produced
            production_data: Quantity, optional calendar day and notes

        Returns:
            Tuple of (updated product, created history row)

        Raises:
            InvalidQuantityError: If quantity is not positive
            ProductNotFoundError: If product doesn't exist
        """
        db = self._require_db()

        quantity = production_data.quantity
        if quantity is None or quantity <= 0:
            raise InvalidQuantityError("Quantity must be greater than zero")

        production_date = (
            force_date_without_timezone(production_data.production_date)
            if production_data.production_date is not None
            else utc_today()
        )

        with self._transaction():
            product = (
                db.query(Product)
                .filter(Product.id == product_id)
                .with_for_update()
                .first()
            )
            if not product:
                raise ProductNotFoundError(product_id)

            product.stock_quantity = Product.stock_quantity + quantity
            record = ProductionHistory(
                product_id=product_id,
                quantity=quantity,
                production_date=production_date,
                notes=production_data.notes or None,
            )
            db.add(record)

        db.refresh(product)
        db.refresh(record)
        cache_service.delete(self.CACHE_PREFIX, str(product_id))

        logger.info(
            f"Production #{record.id} recorded: product #{product_id}, "
            f"quantity {quantity}, new stock {product.stock_quantity}"
        )
        return product, record

    def get_history(self, product_id: int) -> List[ProductionHistory]:
        """Production entries of a product, most recent first."""
        db = self._require_db()

        exists = db.query(Product.id).filter(Product.id == product_id).first()
        if not exists:
            raise ProductNotFoundError(product_id)

        return (
            db.query(ProductionHistory)
            .filter(ProductionHistory.product_id == product_id)
            .order_by(ProductionHistory.production_date.desc(), ProductionHistory.id.desc())
            .all()
        )

    def top_production(self, limit: int = TOP_PRODUCTION_LIMIT) -> List[dict]:
        """Products ranked by total quantity ever produced."""
        db = self._require_db()

        total_produced = func.sum(ProductionHistory.quantity).label("total_produced")
        ranking = (
            db.query(ProductionHistory.product_id, total_produced)
            .group_by(ProductionHistory.product_id)
            .order_by(total_produced.desc())
            .limit(limit)
            .all()
        )

        product_ids = [row.product_id for row in ranking]
        products = {
            p.id: p
            for p in db.query(Product)
            .options(joinedload(Product.company))
            .filter(Product.id.in_(product_ids))
            .all()
        }

        result = []
        for row in ranking:
            product = products.get(row.product_id)
            company = product.company if product else None
            result.append({
                "id": row.product_id,
                "name": product.name if product else "Product not found",
                "category": product.category if product else "",
                "size": product.size if product else None,
                "stock_quantity": product.stock_quantity if product else 0,
                "total_produced": int(row.total_produced or 0),
                "company": {"id": company.id, "name": company.name} if company else None,
            })
        return result
