from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..exceptions import ApiError, SaleRejectedError, ValidationError
from ..idempotency import SubmissionKeys, new_submission_keys, submission_headers
from ..models_sales import SaleCommitRequest, SaleCommitResponse
from .base import BaseClient, _coerce_model


@dataclass
class SalesClient(BaseClient):
    def commit_sale(
        self,
        payload: SaleCommitRequest | Mapping[str, Any],
        keys: SubmissionKeys | None = None,
    ) -> SaleCommitResponse:
        request = _coerce_model(payload, SaleCommitRequest)
        keys = keys or new_submission_keys()
        try:
            data = self._request(
                "POST",
                "/sales",
                json_body=request.to_wire(),
                headers=submission_headers(keys),
                module="sales",
                operation="commit_sale",
            )
        except ValidationError as exc:
            raise SaleRejectedError(
                code=exc.code,
                message=exc.message,
                details=exc.details,
                trace_id=exc.trace_id,
                status_code=exc.status_code,
                raw_payload=exc.raw_payload,
            ) from exc
        if not isinstance(data, dict):
            raise ApiError(
                code="INVALID_RESPONSE",
                message="Expected sale commit response to be a JSON object",
                details=None,
                trace_id=None,
                status_code=0,
            )
        return SaleCommitResponse.model_validate(data)
