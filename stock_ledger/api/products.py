from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from stock_ledger.database import get_db
from stock_ledger.services.product_service import ProductService
from stock_ledger.services.production_service import ProductionService
from stock_ledger.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    LedgerBalance,
)
from stock_ledger.schemas.production import (
    ProductionCreate,
    ProductionResponse,
    ProductionResult,
    TopProductionItem,
)

router = APIRouter(prefix="/products", tags=["Products"])


@router.post(
    "/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a new product with prices and initial stock."
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db)
):
    """
    Create a new product.

    - **name**: Product name (required)
    - **category**: Category tag (required)
    - **cost_price** / **sale_price**: Non-negative prices (required)
    - **stock_quantity**: Initial stock, must be non-negative
    - **company_id**: Supplying company, omit for internal production
    """
    return ProductService(db).create(product_data)


@router.get(
    "/",
    response_model=ProductListResponse,
    summary="List all products",
    description="Get a paginated list of all products with optional search."
)
def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search by product name"),
    category: Optional[str] = Query(None, description="Filter by category"),
    db: Session = Depends(get_db)
):
    """Get paginated list of products."""
    service = ProductService(db)
    products, total, total_pages = service.get_all(page, page_size, search, category)

    return ProductListResponse(
        items=[ProductResponse.model_validate(p) for p in products],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages
    )


@router.get(
    "/top-production",
    response_model=list[TopProductionItem],
    summary="Production ranking",
    description="Top 10 products by total quantity produced."
)
def top_production(db: Session = Depends(get_db)):
    return ProductionService(db).top_production()


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
    description="Get detailed information about a specific product."
)
def get_product(
    product_id: int,
    db: Session = Depends(get_db)
):
    """Get a product by ID, read from the database."""
    return ProductService(db).get_by_id(product_id)


@router.get(
    "/{product_id}/cached",
    summary="Get product from cache",
    description="Get product details from Redis cache (or database if not cached)."
)
def get_product_cached(
    product_id: int,
    db: Session = Depends(get_db)
):
    """
    Get product from cache.

    Returns cached data if available, otherwise fetches from database
    and caches the result.
    """
    return ProductService(db).get_by_id_cached(product_id)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    description="Update product details. Stock changes only through sales and production."
)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db)
):
    """
    Update a product.

    Partial updates are supported - only include fields you want to change.
    Cache is automatically invalidated after update.
    """
    return ProductService(db).update(product_id, product_data)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
    description="Delete a product without sales. Products with sales return 409."
)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db)
):
    """Delete a product."""
    ProductService(db).delete(product_id)
    return None


@router.get(
    "/{product_id}/ledger",
    response_model=LedgerBalance,
    summary="Stock ledger balance",
    description="Compare stored stock with initial stock + production - sales."
)
def get_ledger_balance(
    product_id: int,
    db: Session = Depends(get_db)
):
    return ProductService(db).ledger_balance(product_id)


@router.post(
    "/{product_id}/production",
    response_model=ProductionResult,
    status_code=status.HTTP_201_CREATED,
    summary="Record production",
    description="Add produced units to stock and append a production history entry."
)
def record_production(
    product_id: int,
    production_data: ProductionCreate,
    db: Session = Depends(get_db)
):
    """
    Record in-house production for a product.

    - **quantity**: Units produced, must be positive (required)
    - **production_date**: Calendar day (YYYY-MM-DD), defaults to today
    - **notes**: Optional notes
    """
    product, record = ProductionService(db).record_production(product_id, production_data)
    return ProductionResult(
        message=f"Production of {record.quantity} unit(s) recorded",
        product=ProductResponse.model_validate(product),
        production_record=ProductionResponse.model_validate(record),
    )


@router.get(
    "/{product_id}/production",
    response_model=list[ProductionResponse],
    summary="Production history",
    description="Production entries of a product, most recent first."
)
def list_production(
    product_id: int,
    db: Session = Depends(get_db)
):
    return ProductionService(db).get_history(product_id)
