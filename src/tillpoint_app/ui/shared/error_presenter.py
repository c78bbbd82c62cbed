from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ...domain.errors import (
    CheckoutError,
    ConfirmationRequired,
    InvariantViolation,
    NetworkError,
    PermissionDeniedError,
    ValidationError,
)


@dataclass(frozen=True)
class PresentedError:
    category: str
    user_message: str
    safe_to_retry: bool
    code: str
    details: dict[str, Any]


class ErrorPresenter:
    """Turns engine and backend failures into payloads the checkout screen can show."""

    _CATEGORY_MESSAGES = {
        "validation": "Please review the highlighted fields and try again.",
        "permission_denied": "You do not have permission to perform this action.",
        "conflict": "This action cannot be completed in the current state.",
        "confirmation": "Please confirm to continue.",
        "not_found": "The requested record was not found.",
        "transport": "Temporary connectivity issue. Please retry.",
        "server": "Service error. Try again shortly or contact support.",
        "unknown": "Unexpected error. Please try again.",
    }

    _FAMILY_CATEGORIES: tuple[tuple[type[CheckoutError], str], ...] = (
        (ConfirmationRequired, "confirmation"),
        (ValidationError, "validation"),
        (PermissionDeniedError, "permission_denied"),
        (InvariantViolation, "conflict"),
    )

    def present_exception(self, exc: Exception, *, action: str) -> PresentedError:
        if isinstance(exc, CheckoutError):
            return self.present(
                message=exc.message,
                details=exc.details,
                trace_id=exc.trace_id,
                action=action,
                code=exc.code,
                category=self._family_category(exc),
                allow_retry=isinstance(exc, NetworkError),
            )
        return self.present(message=str(exc), action=action)

    def present(
        self,
        *,
        message: str,
        details: Any = None,
        trace_id: str | None = None,
        action: str,
        code: str | None = None,
        category: str | None = None,
        allow_retry: bool = False,
    ) -> PresentedError:
        normalized_code = (code or self._extract_code(details) or "UNKNOWN").upper()
        resolved = category or self._categorize(message=message, details=details, code=normalized_code)
        safe_to_retry = allow_retry and resolved in {"transport", "server"}
        technical = {
            "code": normalized_code,
            "trace_id": trace_id,
            "action": action,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "raw_details": details,
        }
        return PresentedError(
            category=resolved,
            user_message=self._CATEGORY_MESSAGES[resolved],
            safe_to_retry=safe_to_retry,
            code=normalized_code,
            details=technical,
        )

    def _family_category(self, exc: CheckoutError) -> str | None:
        for family, category in self._FAMILY_CATEGORIES:
            if isinstance(exc, family):
                return category
        # network failures fall through to the text probe to tell transport from server
        return None

    def _categorize(self, *, message: str, details: Any, code: str) -> str:
        probe = f"{message} {details} {code}".lower()
        if any(token in probe for token in {"transport", "timeout", "network", "connection", "tempor"}):
            return "transport"
        if any(token in probe for token in {"http 5", "server", "internal error", "unavailable"}):
            return "server"
        if any(token in probe for token in {"permission", "forbidden", "denied", "403"}):
            return "permission_denied"
        if any(token in probe for token in {"conflict", "already", "409"}):
            return "conflict"
        if any(token in probe for token in {"not found", "404"}):
            return "not_found"
        if any(token in probe for token in {"validation", "invalid", "required", "400", "422"}):
            return "validation"
        return "unknown"

    @staticmethod
    def _extract_code(details: Any) -> str | None:
        if isinstance(details, dict):
            raw = details.get("code")
            return str(raw) if raw else None
        return None
