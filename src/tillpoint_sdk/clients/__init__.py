from .audit_client import AuditClient
from .customers_client import CustomersClient
from .products_client import ProductsClient
from .returns_client import ReturnsClient
from .sales_client import SalesClient

__all__ = [
    "AuditClient",
    "CustomersClient",
    "ProductsClient",
    "ReturnsClient",
    "SalesClient",
]
