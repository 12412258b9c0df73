from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from stock_ledger.database import get_db
from stock_ledger.models.customer import CustomerDeleteOutcome
from stock_ledger.services.customer_service import CustomerService
from stock_ledger.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
    CustomerDetail,
    CustomerListResponse,
    CustomerDeleteResponse,
)

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.post(
    "/",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer"
)
def create_customer(
    customer_data: CustomerCreate,
    db: Session = Depends(get_db)
):
    return CustomerService(db).create(customer_data)


@router.get(
    "/",
    response_model=CustomerListResponse,
    summary="List customers",
    description="Paginated customer list with optional name search and status filter."
)
def list_customers(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search by customer name"),
    is_active: Optional[bool] = Query(None, description="Filter by active status"),
    db: Session = Depends(get_db)
):
    customers, total, total_pages = CustomerService(db).get_all(page, page_size, search, is_active)

    return CustomerListResponse(
        items=[CustomerResponse.model_validate(c) for c in customers],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/{customer_id}",
    response_model=CustomerDetail,
    summary="Get customer with sales",
    description="Customer details with its sales and purchase totals."
)
def get_customer(
    customer_id: int,
    db: Session = Depends(get_db)
):
    detail = CustomerService(db).get_detail(customer_id)
    return CustomerDetail.model_validate(detail, from_attributes=True)


@router.put(
    "/{customer_id}",
    response_model=CustomerResponse,
    summary="Update a customer"
)
def update_customer(
    customer_id: int,
    customer_data: CustomerUpdate,
    db: Session = Depends(get_db)
):
    return CustomerService(db).update(customer_id, customer_data)


@router.delete(
    "/{customer_id}",
    response_model=CustomerDeleteResponse,
    summary="Delete a customer",
    description="""
    Customers with sales are deactivated so their sale history is kept.
    Customers without sales are removed.
    """
)
def delete_customer(
    customer_id: int,
    db: Session = Depends(get_db)
):
    outcome = CustomerService(db).delete(customer_id)

    if outcome == CustomerDeleteOutcome.DEACTIVATED:
        message = "Customer deactivated (has sales)"
    else:
        message = "Customer deleted"

    return CustomerDeleteResponse(outcome=outcome, message=message)
