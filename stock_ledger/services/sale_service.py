from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from typing import List, Tuple
import math
import logging

from stock_ledger.models.product import Product
from stock_ledger.models.customer import Customer
from stock_ledger.models.sale import Sale
from stock_ledger.schemas.sale import SaleCreate
from stock_ledger.exceptions import (
    CustomerNotFoundError,
    InsufficientStockError,
    InvalidQuantityError,
    ProductNotFoundError,
    SaleNotFoundError,
    ValidationError,
)
from stock_ledger.services.base import BaseService
from stock_ledger.utils.cache import cache_service
from stock_ledger.utils.dates import force_date_without_timezone, utc_today
from stock_ledger.utils.money import sale_total, subtotal, to_money

logger = logging.getLogger(__name__)


def _stock_constraint_violated(error: IntegrityError) -> InsufficientStockError:
    return InsufficientStockError("Insufficient stock: concurrent modification detected")


class SaleService(BaseService):
    """
    Service class for Sale operations with race condition handling.

    RACE CONDITION HANDLING STRATEGY:
    =================================
    Recording a sale reads the product with SELECT ... FOR UPDATE, so the
    stock check and the decrement happen under the same row lock and inside
    the same transaction as the sale insert:

    1. Acquire a row-level lock on the product
    2. Check stock against the locked (current) value
    3. Insert the sale and decrement stock
    4. Commit, which releases the lock

    A second sale for the same product waits on the lock and then sees the
    decremented stock, so concurrent sales can never oversell. The
    decrement is written as ``stock_quantity = stock_quantity - n`` and the
    ``stock_quantity >= 0`` check constraint backs it up at the database
    level: a write that would go negative fails with InsufficientStockError.
    Deleting a sale locks the sale row and then the product row before
    giving the quantity back.
    """

    CACHE_PREFIX = "product"

    def record_sale(self, sale_data: SaleCreate) -> Sale:
        """
        Record a sale and take its quantity out of stock atomically.

        Args:
            sale_data: Sale data with product, optional customer, quantity and prices

        Returns:
            Created sale instance

        Raises:
            ValidationError: If quantity, price or discount are out of range
            ProductNotFoundError: If product doesn't exist
            InsufficientStockError: If not enough stock available
            CustomerNotFoundError: If a customer was given and doesn't exist
            StorageError: If the database fails
        """
        db = self._require_db()

        product_id = sale_data.product_id
        customer_id = sale_data.customer_id
        quantity = sale_data.quantity
        self._validate(quantity, sale_data.unit_price, sale_data.discount)

        unit_price = to_money(sale_data.unit_price)
        discount = to_money(sale_data.discount)
        total_amount = sale_total(quantity, unit_price, discount)
        sale_date = (
            force_date_without_timezone(sale_data.sale_date)
            if sale_data.sale_date is not None
            else utc_today()
        )

        with self._transaction(on_integrity_error=_stock_constraint_violated):
            product = (
                db.query(Product)
                .filter(Product.id == product_id)
                .with_for_update()  # Pessimistic locking
                .first()
            )

            if not product:
                raise ProductNotFoundError(product_id)

            # Check stock availability (inside the lock)
            if product.stock_quantity < quantity:
                raise InsufficientStockError(
                    f"Insufficient stock. Available: {product.stock_quantity}, Requested: {quantity}",
                    available=product.stock_quantity,
                    requested=quantity,
                )

            if customer_id is not None:
                # Shared lock keeps the customer from being hard-deleted under us
                customer = (
                    db.query(Customer)
                    .filter(Customer.id == customer_id)
                    .with_for_update(read=True)
                    .first()
                )
                if not customer:
                    raise CustomerNotFoundError(customer_id)

            sale = Sale(
                product_id=product_id,
                customer_id=customer_id,
                quantity=quantity,
                unit_price=unit_price,
                discount=discount,
                total_amount=total_amount,
                sale_date=sale_date,
                notes=sale_data.notes or None,
            )
            db.add(sale)
            # Relative UPDATE so the check constraint sees the stored value
            product.stock_quantity = Product.stock_quantity - quantity

        db.refresh(sale)

        # Invalidate product cache since stock changed
        cache_service.delete(self.CACHE_PREFIX, str(product_id))

        logger.info(f"Sale #{sale.id} recorded: product #{product_id}, quantity {quantity}")
        return sale

    def delete_sale(self, sale_id: int) -> int:
        """
        Delete a sale and give its quantity back to the product stock.

        Returns:
            The quantity restored to stock

        Raises:
            SaleNotFoundError: If the sale doesn't exist
        """
        db = self._require_db()

        with self._transaction():
            sale = (
                db.query(Sale)
                .filter(Sale.id == sale_id)
                .with_for_update()
                .first()
            )
            if not sale:
                raise SaleNotFoundError(sale_id)

            product_id = sale.product_id
            restored_quantity = sale.quantity

            product = (
                db.query(Product)
                .filter(Product.id == product_id)
                .with_for_update()
                .first()
            )

            db.delete(sale)
            if product is not None:
                product.stock_quantity = Product.stock_quantity + restored_quantity

        cache_service.delete(self.CACHE_PREFIX, str(product_id))

        logger.info(
            f"Sale #{sale_id} deleted: product #{product_id}, quantity {restored_quantity} restored"
        )
        return restored_quantity

    def get_sale(self, sale_id: int) -> Sale:
        """Get a sale by ID, raising SaleNotFoundError if missing."""
        db = self._require_db()
        sale = (
            db.query(Sale)
            .options(joinedload(Sale.product), joinedload(Sale.customer))
            .filter(Sale.id == sale_id)
            .first()
        )
        if not sale:
            raise SaleNotFoundError(sale_id)
        return sale

    def get_sales(
        self,
        page: int = 1,
        page_size: int = 10,
        product_id: int = None,
        customer_id: int = None,
    ) -> Tuple[List[Sale], int, int]:
        """
        Get paginated list of sales, newest sale date first.

        Args:
            page: Page number
            page_size: Items per page
            product_id: Only sales of this product
            customer_id: Only sales to this customer

        Returns:
            Tuple of (sales list, total count, total pages)
        """
        db = self._require_db()
        query = db.query(Sale).options(joinedload(Sale.product), joinedload(Sale.customer))

        if product_id:
            query = query.filter(Sale.product_id == product_id)
        if customer_id:
            query = query.filter(Sale.customer_id == customer_id)

        total = query.count()
        total_pages = math.ceil(total / page_size) if total > 0 else 1

        offset = (page - 1) * page_size
        sales = (
            query.order_by(Sale.sale_date.desc(), Sale.id.desc())
            .offset(offset)
            .limit(page_size)
            .all()
        )

        return sales, total, total_pages

    @staticmethod
    def _validate(quantity, unit_price, discount) -> None:
        if quantity is None or quantity <= 0:
            raise InvalidQuantityError("Quantity must be a positive integer")
        if unit_price is None or unit_price < 0:
            raise ValidationError("Unit price must not be negative")
        if discount is not None:
            if discount < 0:
                raise ValidationError("Discount must not be negative")
            if to_money(discount) > subtotal(quantity, unit_price):
                raise ValidationError("Discount cannot exceed the sale subtotal")
