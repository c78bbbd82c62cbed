from __future__ import annotations

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class SubmissionKeys:
    """Client-side identity of one sale submission attempt.

    ``attempt_id`` is logged with every commit so an operator-initiated resubmit
    can be told apart from the first attempt in the logs.
    """

    attempt_id: str
    idempotency_key: str


def new_submission_keys() -> SubmissionKeys:
    return SubmissionKeys(attempt_id=str(uuid.uuid4()), idempotency_key=str(uuid.uuid4()))


def submission_headers(keys: SubmissionKeys) -> dict[str, str]:
    return {"Idempotency-Key": keys.idempotency_key}
