import logging

from sqlalchemy.exc import OperationalError

from stock_ledger.config import get_settings
from stock_ledger.tasks.celery_app import celery_app
from stock_ledger.database import SessionLocal
from stock_ledger.models.product import Product
from stock_ledger.services.product_service import ProductService

logger = logging.getLogger(__name__)

settings = get_settings()


@celery_app.task(bind=True, name="check_low_stock")
def check_low_stock(self, product_id: int) -> dict:
    """
    Background task run after a sale commits.

    Logs a warning when the product's stock fell below the low-stock
    threshold, so restocking can be planned.

    Args:
        product_id: ID of the product that was just sold

    Returns:
        Dictionary with the check result
    """
    if SessionLocal is None:
        logger.error("Database not configured, low-stock check skipped")
        return {"status": "failed", "error": "Database not configured"}

    db = SessionLocal()

    try:
        product = db.query(Product).filter(Product.id == product_id).first()

        if not product:
            logger.error(f"Product #{product_id} not found")
            return {"status": "failed", "error": "Product not found"}

        threshold = settings.LOW_STOCK_THRESHOLD
        if product.stock_quantity < threshold:
            logger.warning(
                f"Product #{product_id} is low on stock: "
                f"{product.stock_quantity} left (threshold {threshold})"
            )
            status = "low_stock"
        else:
            status = "ok"

        return {
            "status": status,
            "product_id": product_id,
            "stock_quantity": product.stock_quantity,
            "threshold": threshold,
        }

    except OperationalError as e:
        logger.error(f"Error checking stock of Product #{product_id}: {e}")
        raise self.retry(exc=e, countdown=60, max_retries=3)

    finally:
        db.close()


@celery_app.task(bind=True, name="reconcile_stock")
def reconcile_stock(self, product_id: int = None) -> dict:
    """
    Verify that every product's stock matches its ledger.

    For each product, initial stock + total produced - total sold must
    equal the stored stock quantity. Mismatches are logged and returned;
    nothing is corrected automatically.

    Args:
        product_id: Check only this product (all products when omitted)

    Returns:
        Dictionary with the number of products checked and the mismatches
    """
    if SessionLocal is None:
        logger.error("Database not configured, stock reconciliation skipped")
        return {"status": "failed", "error": "Database not configured"}

    db = SessionLocal()

    try:
        service = ProductService(db)
        if product_id is not None:
            balances = [service.ledger_balance(product_id)]
        else:
            balances = service.ledger_balances()

        mismatches = [b for b in balances if not b["consistent"]]
        for balance in mismatches:
            logger.error(
                f"Stock mismatch on Product #{balance['product_id']}: "
                f"stored {balance['stock_quantity']}, ledger {balance['expected_stock']}"
            )

        logger.info(f"Stock reconciliation checked {len(balances)} product(s)")
        return {
            "status": "consistent" if not mismatches else "mismatch",
            "checked": len(balances),
            "mismatches": mismatches,
        }

    except OperationalError as e:
        logger.error(f"Error reconciling stock: {e}")
        raise self.retry(exc=e, countdown=300, max_retries=3)

    finally:
        db.close()
