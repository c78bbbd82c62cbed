from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from tillpoint_sdk import PriceOverrideAudit, UserResponse, UserRole

from ..domain.errors import ForbiddenError, NoChangeError, ValidationError
from ..domain.models import CartLine

logger = logging.getLogger(__name__)

AuditSink = Callable[[PriceOverrideAudit], None]

OVERRIDE_ROLES: tuple[UserRole, ...] = (UserRole.ADMIN, UserRole.MANAGER)


@dataclass(frozen=True)
class PriceOverrideResult:
    line: CartLine
    audit: PriceOverrideAudit
    warning: str | None = None


class PriceOverrideAuthority:
    def __init__(self, audit_sink: AuditSink | None = None) -> None:
        self.audit_sink = audit_sink

    def authorize(self, user: UserResponse | None) -> None:
        if user is None or not user.has_role(*OVERRIDE_ROLES):
            raise ForbiddenError()

    def apply(self, user: UserResponse | None, line: CartLine, new_price: Decimal, reason: str) -> PriceOverrideResult:
        """Return ``line`` repriced at ``new_price`` together with its audit record.

        The audit sink is best effort: a failure is logged and reported on the
        result as ``warning`` while the price change still stands.
        """
        self.authorize(user)
        if new_price < 0:
            raise ValidationError(code="INVALID_PRICE", message="Price must be >= 0")
        cleaned_reason = (reason or "").strip()
        if not cleaned_reason:
            raise ValidationError(code="REASON_REQUIRED", message="A reason is required for a price override")
        if new_price == line.unit_price:
            raise NoChangeError()

        repriced = line.with_unit_price(new_price)
        audit = PriceOverrideAudit(
            user_id=user.id,
            username=user.username,
            product_id=line.product_id,
            product_name=line.name,
            old_price=line.unit_price,
            new_price=new_price,
            reason=cleaned_reason,
            timestamp=datetime.now(timezone.utc),
        )
        return PriceOverrideResult(line=repriced, audit=audit, warning=self._record(audit))

    def _record(self, audit: PriceOverrideAudit) -> str | None:
        if self.audit_sink is None:
            return None
        try:
            self.audit_sink(audit)
        except Exception as exc:
            logger.warning(
                "price_override_audit_failed",
                extra={"product_id": audit.product_id, "user_id": audit.user_id, "error": str(exc)},
            )
            return "Price changed, but the audit record could not be saved"
        logger.info("price_override_audited", extra={"product_id": audit.product_id, "user_id": audit.user_id})
        return None
