from stock_ledger.models.company import Company
from stock_ledger.models.customer import Customer, CustomerDeleteOutcome
from stock_ledger.models.product import Product
from stock_ledger.models.production import ProductionHistory
from stock_ledger.models.sale import Sale

__all__ = [
    "Company",
    "Customer",
    "CustomerDeleteOutcome",
    "Product",
    "ProductionHistory",
    "Sale",
]
