from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..exceptions import ReturnRejectedError, ValidationError
from ..models_sales import ReturnRequest, ReturnResponse
from .base import BaseClient, _coerce_model


@dataclass
class ReturnsClient(BaseClient):
    def submit_return(self, payload: ReturnRequest | Mapping[str, Any]) -> ReturnResponse:
        request = _coerce_model(payload, ReturnRequest)
        try:
            data = self._request(
                "POST",
                "/sales/return",
                json_body=request.to_wire(),
                module="returns",
                operation="submit_return",
            )
        except ValidationError as exc:
            raise ReturnRejectedError(
                code=exc.code,
                message=exc.message,
                details=exc.details,
                trace_id=exc.trace_id,
                status_code=exc.status_code,
                raw_payload=exc.raw_payload,
            ) from exc
        if data is None:
            return ReturnResponse()
        if not isinstance(data, dict):
            raise ValueError("Expected return response to be a JSON object")
        return ReturnResponse.model_validate(data.get("return", data))
