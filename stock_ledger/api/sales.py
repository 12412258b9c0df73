from fastapi import APIRouter, Depends, Query, status
from kombu.exceptions import OperationalError as BrokerError
from sqlalchemy.orm import Session
from typing import Optional
import logging

from stock_ledger.database import get_db
from stock_ledger.models.sale import Sale
from stock_ledger.services.sale_service import SaleService
from stock_ledger.schemas.sale import (
    SaleCreate,
    SaleResponse,
    SaleWithDetails,
    SaleListResponse,
    SaleDeleteResponse,
)
from stock_ledger.tasks.stock_tasks import check_low_stock

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sales", tags=["Sales"])


def _with_details(sale: Sale) -> SaleWithDetails:
    details = SaleWithDetails.model_validate(sale)
    if sale.product is not None:
        details.product_name = sale.product.name
        details.product_category = sale.product.category
    if sale.customer is not None:
        details.customer_name = sale.customer.name
    return details


@router.post(
    "/",
    response_model=SaleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a sale",
    description="""
    Sell a product, taking the quantity out of stock.

    **Race Condition Handling:**
    The product row is locked with SELECT FOR UPDATE while stock is checked
    and decremented, so concurrent sales can never oversell:
    - Sales that fit in the remaining stock succeed
    - Others receive a 400 error with 'Insufficient stock' message

    After the sale commits, a background Celery task checks whether the
    product dropped below the low-stock threshold.
    """
)
def create_sale(
    sale_data: SaleCreate,
    db: Session = Depends(get_db)
):
    """
    Record a sale.

    - **product_id**: ID of the product sold (required)
    - **customer_id**: Customer, omit for a walk-in sale
    - **quantity**: Number of items, must be positive (required)
    - **unit_price**: Price per item at the moment of sale (required)
    - **discount**: Discount on the whole sale, at most quantity x unit_price
    - **sale_date**: Calendar day (YYYY-MM-DD), defaults to today
    """
    sale = SaleService(db).record_sale(sale_data)

    try:
        check_low_stock.delay(sale.product_id)
    except BrokerError as e:
        # The sale is committed either way
        logger.warning(f"Could not enqueue low-stock check for Sale #{sale.id}: {e}")

    return sale


@router.get(
    "/",
    response_model=SaleListResponse,
    summary="List sales",
    description="Get a paginated list of sales, newest first, optionally filtered."
)
def list_sales(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    product_id: Optional[int] = Query(None, description="Filter by product"),
    customer_id: Optional[int] = Query(None, description="Filter by customer"),
    db: Session = Depends(get_db)
):
    """Get paginated list of sales."""
    sales, total, total_pages = SaleService(db).get_sales(page, page_size, product_id, customer_id)

    return SaleListResponse(
        items=[_with_details(s) for s in sales],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/{sale_id}",
    response_model=SaleWithDetails,
    summary="Get sale by ID"
)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db)
):
    return _with_details(SaleService(db).get_sale(sale_id))


@router.delete(
    "/{sale_id}",
    response_model=SaleDeleteResponse,
    summary="Delete a sale",
    description="Delete a sale and give its quantity back to the product stock."
)
def delete_sale(
    sale_id: int,
    db: Session = Depends(get_db)
):
    restored = SaleService(db).delete_sale(sale_id)
    return SaleDeleteResponse(
        message="Sale deleted",
        restored_quantity=restored
    )
