from __future__ import annotations

from dataclasses import dataclass

from .clients.audit_client import AuditClient
from .clients.customers_client import CustomersClient
from .clients.products_client import ProductsClient
from .clients.returns_client import ReturnsClient
from .clients.sales_client import SalesClient
from .config import ClientConfig
from .http_client import HttpClient
from .models import UserResponse
from .tracing import TraceContext


@dataclass
class ApiSession:
    config: ClientConfig
    trace: TraceContext | None = None
    token: str | None = None
    user: UserResponse | None = None
    branch_id: str | None = None
    terminal_id: str | None = None
    http: HttpClient | None = None

    def __post_init__(self) -> None:
        self.trace = self.trace or TraceContext()
        self.http = self.http or HttpClient(config=self.config, trace=self.trace)

    def _client_kwargs(self) -> dict[str, object]:
        return {
            "http": self.http,
            "access_token": self.token,
            "branch_id": self.branch_id,
            "terminal_id": self.terminal_id,
        }

    def sales_client(self) -> SalesClient:
        return SalesClient(**self._client_kwargs())

    def products_client(self) -> ProductsClient:
        return ProductsClient(**self._client_kwargs())

    def customers_client(self) -> CustomersClient:
        return CustomersClient(**self._client_kwargs())

    def returns_client(self) -> ReturnsClient:
        return ReturnsClient(**self._client_kwargs())

    def audit_client(self) -> AuditClient:
        return AuditClient(**self._client_kwargs())

    def establish(self, token: str, user: UserResponse | None) -> None:
        self.token = token
        self.user = user
        if user is not None and user.branch_id:
            self.branch_id = user.branch_id

    def clear(self) -> None:
        self.token = None
        self.user = None
