from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from stock_ledger.database import get_db
from stock_ledger.services.company_service import CompanyService
from stock_ledger.schemas.company import CompanyCreate, CompanyResponse

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.post(
    "/",
    response_model=CompanyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a company",
    description="Register a supplier company. A CNPJ already on file returns 409."
)
def create_company(
    company_data: CompanyCreate,
    db: Session = Depends(get_db)
):
    return CompanyService(db).create(company_data)


@router.get(
    "/",
    response_model=list[CompanyResponse],
    summary="List companies"
)
def list_companies(
    is_active: Optional[bool] = Query(None, description="Filter by active status"),
    name: Optional[str] = Query(None, description="Search by company name"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(100, ge=1, le=500, description="Items per page"),
    db: Session = Depends(get_db)
):
    return CompanyService(db).get_all(is_active, name, page, page_size)


@router.get(
    "/{company_id}",
    response_model=CompanyResponse,
    summary="Get company by ID"
)
def get_company(
    company_id: int,
    db: Session = Depends(get_db)
):
    return CompanyService(db).get_by_id(company_id)


@router.patch(
    "/{company_id}/toggle-status",
    response_model=CompanyResponse,
    summary="Activate or deactivate a company"
)
def toggle_company_status(
    company_id: int,
    db: Session = Depends(get_db)
):
    return CompanyService(db).toggle_status(company_id)


@router.delete(
    "/{company_id}",
    summary="Delete a company",
    description="Only companies without products can be deleted; otherwise 409."
)
def delete_company(
    company_id: int,
    db: Session = Depends(get_db)
):
    name = CompanyService(db).delete(company_id)
    return {"message": "Company deleted", "deleted_company": name}
