from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy.exc import OperationalError
import logging

from stock_ledger.config import get_settings
from stock_ledger.database import engine, Base
from stock_ledger import models  # noqa: F401  (registers every table on Base)
from stock_ledger.api import products, sales, customers, companies, reports, health
from stock_ledger.exceptions import (
    LedgerError,
    ledger_exception_handler,
    generic_exception_handler,
)

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    logger.info("Starting up application...")

    if engine is None:
        logger.warning("DATABASE_URL is not set, running in unavailable mode")
    else:
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    if engine is not None:
        engine.dispose()


async def database_error_handler(_request: Request, exc: OperationalError) -> JSONResponse:
    """Database unreachable on a read path."""
    logger.error(f"Database unavailable: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database connection error"}
    )


# Create FastAPI application
app = FastAPI(
    title="Stock Ledger",
    description="""
    Inventory and sales management API for a small business:

    - **Sales**: Record and delete sales, keeping product stock in step
    - **Production**: Restock products from in-house production
    - **Reports**: Date-range sales report and dashboard
    - **Catalog**: Products, customers and supplier companies

    ## Stock consistency
    Product stock is a running total of initial stock + production - sales.
    Every operation that changes it locks the product row with
    `SELECT FOR UPDATE` and writes the stock change and its ledger row in one
    transaction, so concurrent sales can never drive stock below zero.

    ## Calendar dates
    Sale and production dates are calendar days stored as UTC midnight, and
    report ranges include both end days in full.
    """,
    version="1.0.0",
    license_info={
        "name": "MIT",
        "url": "https://opensource.org/licenses/MIT"
    },
    lifespan=lifespan
)

# Register exception handlers
app.add_exception_handler(LedgerError, ledger_exception_handler)
app.add_exception_handler(OperationalError, database_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(health.router, prefix="/api/v1")
app.include_router(products.router, prefix="/api/v1")
app.include_router(sales.router, prefix="/api/v1")
app.include_router(customers.router, prefix="/api/v1")
app.include_router(companies.router, prefix="/api/v1")
app.include_router(reports.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
def root():
    """Root endpoint with API information."""
    return {
        "name": "Stock Ledger",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
        "health": "/api/v1/health"
    }
