from .config import ClientConfig, ConfigError, load_config
from .exceptions import (
    ApiError,
    ForbiddenError,
    NotFoundError,
    ReturnRejectedError,
    SaleRejectedError,
    TransportError,
    UnauthorizedError,
    ValidationError,
)
from .http_client import HttpClient
from .idempotency import SubmissionKeys, new_submission_keys
from .local_store import LocalStore
from .models import UserResponse, UserRole
from .models_catalog import Customer, CustomerListResponse, Product, ProductListResponse
from .models_sales import (
    PaymentIntent,
    PriceOverrideAudit,
    ReturnItem,
    ReturnRequest,
    ReturnResponse,
    SaleCommitRequest,
    SaleCommitResponse,
    SaleItemCreate,
    SplitPayment,
)
from .payment_validation import (
    MONEY_EPSILON,
    PaymentTotals,
    PaymentValidationIssue,
    PaymentValidationResult,
    compute_tender_totals,
    money_equal,
    validate_payment_intent,
)
from .session import ApiSession
from .shift_validation import (
    ShiftValidationIssue,
    ShiftValidationResult,
    validate_close_shift,
    validate_open_shift,
    validate_refund_amount,
)
from .tracing import TraceContext
from .ui_errors import UserFacingError, to_user_facing_error

__all__ = [
    "ApiError",
    "ApiSession",
    "ClientConfig",
    "ConfigError",
    "Customer",
    "CustomerListResponse",
    "ForbiddenError",
    "HttpClient",
    "LocalStore",
    "MONEY_EPSILON",
    "NotFoundError",
    "PaymentIntent",
    "PaymentTotals",
    "PaymentValidationIssue",
    "PaymentValidationResult",
    "PriceOverrideAudit",
    "Product",
    "ProductListResponse",
    "ReturnItem",
    "ReturnRejectedError",
    "ReturnRequest",
    "ReturnResponse",
    "SaleCommitRequest",
    "SaleCommitResponse",
    "SaleItemCreate",
    "SaleRejectedError",
    "ShiftValidationIssue",
    "ShiftValidationResult",
    "SplitPayment",
    "SubmissionKeys",
    "TraceContext",
    "TransportError",
    "UnauthorizedError",
    "UserFacingError",
    "UserResponse",
    "UserRole",
    "ValidationError",
    "compute_tender_totals",
    "load_config",
    "money_equal",
    "new_submission_keys",
    "to_user_facing_error",
    "validate_close_shift",
    "validate_open_shift",
    "validate_payment_intent",
    "validate_refund_amount",
]
