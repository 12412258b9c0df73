from sqlalchemy.orm import selectinload
from typing import List
import logging

from stock_ledger.models.company import Company
from stock_ledger.schemas.company import CompanyCreate
from stock_ledger.exceptions import CompanyNotFoundError, ConflictError, ValidationError
from stock_ledger.services.base import BaseService

logger = logging.getLogger(__name__)


def _duplicate_cnpj(error) -> ConflictError:
    return ConflictError("CNPJ already registered")


class CompanyService(BaseService):
    """Service class for supplier companies. Companies never touch stock."""

    def create(self, company_data: CompanyCreate) -> Company:
        """
        Register a company.

        Raises:
            ValidationError: If the name is blank
            ConflictError: If the CNPJ is already registered
        """
        db = self._require_db()
        data = {
            field: (value.strip() or None) if isinstance(value, str) else value
            for field, value in company_data.model_dump().items()
        }
        if not data.get("name"):
            raise ValidationError("Company name is required")

        if data.get("cnpj"):
            existing = db.query(Company.id).filter(Company.cnpj == data["cnpj"]).first()
            if existing:
                raise ConflictError("CNPJ already registered")

        # The unique index still catches a concurrent insert of the same CNPJ
        with self._transaction(on_integrity_error=_duplicate_cnpj):
            company = Company(**data, is_active=True)
            db.add(company)

        db.refresh(company)
        logger.info(f"Company #{company.id} created")
        return company

    def get_by_id(self, company_id: int) -> Company:
        db = self._require_db()
        company = (
            db.query(Company)
            .options(selectinload(Company.products))
            .filter(Company.id == company_id)
            .first()
        )
        if not company:
            raise CompanyNotFoundError(company_id)
        return company

    def get_all(
        self,
        is_active: bool = None,
        name: str = None,
        page: int = 1,
        page_size: int = 100,
    ) -> List[Company]:
        """Companies ordered by name, optionally filtered by status and name."""
        db = self._require_db()
        query = db.query(Company).options(selectinload(Company.products))

        if is_active is not None:
            query = query.filter(Company.is_active == is_active)
        if name:
            query = query.filter(Company.name.ilike(f"%{name}%"))

        offset = (page - 1) * page_size
        return query.order_by(Company.name.asc()).offset(offset).limit(page_size).all()

    def toggle_status(self, company_id: int) -> Company:
        db = self._require_db()
        with self._transaction():
            company = db.query(Company).filter(Company.id == company_id).first()
            if not company:
                raise CompanyNotFoundError(company_id)
            company.is_active = not company.is_active
        db.refresh(company)
        return company

    def delete(self, company_id: int) -> str:
        """
        Delete a company that owns no products.

        Returns:
            Name of the deleted company

        Raises:
            CompanyNotFoundError: If the company doesn't exist
            ConflictError: If products still reference the company
        """
        db = self._require_db()
        with self._transaction():
            company = (
                db.query(Company)
                .filter(Company.id == company_id)
                .with_for_update()
                .first()
            )
            if not company:
                raise CompanyNotFoundError(company_id)

            product_count = company.product_count
            if product_count > 0:
                raise ConflictError(
                    f"Company '{company.name}' still has {product_count} product(s); "
                    f"delete them before deleting the company"
                )

            name = company.name
            db.delete(company)

        logger.info(f"Company #{company_id} deleted")
        return name
