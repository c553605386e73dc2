"""Domain record for one deferred ledger request held in the sync queue."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from datetime_utils import parse_iso_utc, to_iso_utc, utc_now


class OperationStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    FAILED = "FAILED"


class HttpMethod(str, Enum):
    POST = "POST"
    PUT = "PUT"


class OperationKind(str, Enum):
    ATTENDANCE = "ATTENDANCE"
    DEPOSIT = "DEPOSIT"
    REPAYMENT = "REPAYMENT"


def _coerce(enum_cls, value, label: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"Unsupported {label}: {value!r} (expected one of {allowed})") from None


def coerce_kind(value: Any) -> OperationKind:
    return _coerce(OperationKind, value, "operation kind")


def coerce_method(value: Any) -> HttpMethod:
    return _coerce(HttpMethod, value, "HTTP method")


@dataclass
class QueuedOperation:
    id: str
    kind: OperationKind
    endpoint: str
    method: HttpMethod
    body: Any
    created_at: datetime = field(default_factory=utc_now)
    retry_count: int = 0
    status: OperationStatus = OperationStatus.PENDING
    last_error: Optional[str] = None

    def with_status(self, status: OperationStatus, **changes: Any) -> "QueuedOperation":
        return replace(self, status=status, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "endpoint": self.endpoint,
            "method": self.method.value,
            "body": self.body,
            "createdAt": to_iso_utc(self.created_at),
            "retryCount": self.retry_count,
            "status": self.status.value,
            "lastError": self.last_error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueuedOperation":
        return cls(
            id=str(data["id"]),
            kind=coerce_kind(data["kind"]),
            endpoint=str(data["endpoint"]),
            method=coerce_method(data["method"]),
            body=data.get("body"),
            created_at=parse_iso_utc(data.get("createdAt")) or utc_now(),
            retry_count=int(data.get("retryCount") or 0),
            status=OperationStatus(data.get("status") or OperationStatus.PENDING.value),
            last_error=data.get("lastError"),
        )


__all__ = [
    "HttpMethod",
    "OperationKind",
    "OperationStatus",
    "QueuedOperation",
    "coerce_kind",
    "coerce_method",
]
