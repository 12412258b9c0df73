import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(LedgerError):
    """Malformed or out-of-range input, detected before touching the database."""
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidQuantityError(ValidationError):
    pass


class InvalidDateRangeError(ValidationError):
    pass


class NotFoundError(LedgerError):
    """A referenced row does not exist."""
    status_code = status.HTTP_404_NOT_FOUND


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found")


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id: int):
        self.customer_id = customer_id
        super().__init__(f"Customer with ID {customer_id} not found")


class SaleNotFoundError(NotFoundError):
    def __init__(self, sale_id: int):
        self.sale_id = sale_id
        super().__init__(f"Sale with ID {sale_id} not found")


class CompanyNotFoundError(NotFoundError):
    def __init__(self, company_id: int):
        self.company_id = company_id
        super().__init__(f"Company with ID {company_id} not found")


class InsufficientStockError(LedgerError):
    """Raised when there's not enough stock to fulfill a sale."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, available: int = None, requested: int = None):
        self.available = available
        self.requested = requested
        super().__init__(message)


class ConflictError(LedgerError):
    """The operation clashes with existing data (duplicate key, dependent rows)."""
    status_code = status.HTTP_409_CONFLICT


class StorageError(LedgerError):
    """The database failed for infrastructure reasons."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ServiceUnavailableError(StorageError):
    def __init__(self, message: str = "Service unavailable: database is not configured"):
        super().__init__(message)


async def ledger_exception_handler(_request: Request, exc: LedgerError) -> JSONResponse:
    """Global handler for LedgerError - converts to proper HTTP response."""
    if isinstance(exc, StorageError):
        logger.error(f"Storage failure: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message}
    )


async def generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Global handler for unhandled exceptions - returns 500."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )
