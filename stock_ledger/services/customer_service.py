from sqlalchemy import func
from typing import List, Tuple
import math
import logging

from stock_ledger.models.customer import Customer, CustomerDeleteOutcome
from stock_ledger.models.sale import Sale
from stock_ledger.schemas.customer import CustomerCreate, CustomerUpdate
from stock_ledger.exceptions import CustomerNotFoundError
from stock_ledger.services.base import BaseService
from stock_ledger.utils.money import to_money

logger = logging.getLogger(__name__)


class CustomerService(BaseService):
    """
    Service class for Customer operations.

    Deleting a customer that has sales only deactivates it, so those sales
    keep pointing at a real row. Customers without sales are removed.
    """

    def create(self, customer_data: CustomerCreate) -> Customer:
        db = self._require_db()
        with self._transaction():
            customer = Customer(**self._clean(customer_data.model_dump()))
            db.add(customer)
        db.refresh(customer)
        logger.info(f"Customer #{customer.id} created")
        return customer

    def get_by_id(self, customer_id: int) -> Customer:
        db = self._require_db()
        customer = db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise CustomerNotFoundError(customer_id)
        return customer

    def get_detail(self, customer_id: int) -> dict:
        """
        Customer with its sales (newest first) and purchase totals.

        Returns:
            Dictionary matching the CustomerDetail schema
        """
        customer = self.get_by_id(customer_id)
        sales = (
            self.db.query(Sale)
            .filter(Sale.customer_id == customer_id)
            .order_by(Sale.sale_date.desc(), Sale.id.desc())
            .all()
        )

        total_spent = sum((to_money(s.total_amount) for s in sales), to_money(0))
        detail = {
            column.name: getattr(customer, column.name)
            for column in Customer.__table__.columns
        }
        detail.update(
            sales=sales,
            total_spent=total_spent,
            total_items=sum(s.quantity for s in sales),
            sales_count=len(sales),
        )
        return detail

    def get_all(
        self,
        page: int = 1,
        page_size: int = 10,
        search: str = None,
        is_active: bool = None,
    ) -> Tuple[List[Customer], int, int]:
        """
        Get paginated list of customers ordered by name.

        Returns:
            Tuple of (customers list, total count, total pages)
        """
        db = self._require_db()
        query = db.query(Customer)

        if search:
            query = query.filter(Customer.name.ilike(f"%{search}%"))
        if is_active is not None:
            query = query.filter(Customer.is_active == is_active)

        total = query.count()
        total_pages = math.ceil(total / page_size) if total > 0 else 1

        offset = (page - 1) * page_size
        customers = query.order_by(Customer.name.asc(), Customer.id.asc()).offset(offset).limit(page_size).all()

        return customers, total, total_pages

    def update(self, customer_id: int, customer_data: CustomerUpdate) -> Customer:
        db = self._require_db()
        update_data = self._clean(customer_data.model_dump(exclude_unset=True))

        with self._transaction():
            customer = db.query(Customer).filter(Customer.id == customer_id).first()
            if not customer:
                raise CustomerNotFoundError(customer_id)
            for field, value in update_data.items():
                if field in ("name", "is_active") and value is None:
                    continue
                setattr(customer, field, value)

        db.refresh(customer)
        return customer

    def delete(self, customer_id: int) -> CustomerDeleteOutcome:
        """
        Delete or deactivate a customer.

        State transitions:
            Active/Inactive with sales    -> Inactive (row kept)
            Active/Inactive without sales -> Deleted

        Raises:
            CustomerNotFoundError: If the customer doesn't exist, including
                when it was already deleted by an earlier call
        """
        db = self._require_db()

        with self._transaction():
            customer = (
                db.query(Customer)
                .filter(Customer.id == customer_id)
                .with_for_update()
                .first()
            )
            if not customer:
                raise CustomerNotFoundError(customer_id)

            sales_count = (
                db.query(func.count(Sale.id))
                .filter(Sale.customer_id == customer_id)
                .scalar()
            )

            if sales_count > 0:
                customer.is_active = False
                outcome = CustomerDeleteOutcome.DEACTIVATED
            else:
                db.delete(customer)
                outcome = CustomerDeleteOutcome.DELETED

        logger.info(f"Customer #{customer_id} {outcome.value}")
        return outcome

    @staticmethod
    def _clean(data: dict) -> dict:
        """Blank optional strings are stored as NULL."""
        cleaned = {}
        for field, value in data.items():
            if isinstance(value, str):
                value = value.strip() or None
            cleaned[field] = value
        return cleaned
