"""Builders for the ledger requests a meeting produces.

Each builder returns a :class:`LedgerRequest`, which unpacks straight into
``SyncQueue.enqueue(*request)``.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Mapping, NamedTuple, Optional

from datetime_utils import LEDGER_DATE_FORMAT, LEDGER_LOCALE, format_ledger_date
from models.queued_operation import HttpMethod, OperationKind

# UGX per share
SHARE_PRICE = 5000

ATTENDANCE_TYPES = {
    "PRESENT": 1,
    "ABSENT": 2,
    "LATE": 3,
}


class LedgerRequest(NamedTuple):
    kind: OperationKind
    endpoint: str
    method: HttpMethod
    body: Dict[str, Any]


def share_purchase_amount(shares: int) -> int:
    if shares < 0:
        raise ValueError("Share count cannot be negative")
    return shares * SHARE_PRICE


def _transaction_body(
    amount: int | float,
    transaction_date: date | str,
    note: Optional[str],
    payment_type_id: Optional[int],
) -> Dict[str, Any]:
    if amount <= 0:
        raise ValueError(f"Transaction amount must be positive, got {amount!r}")
    body: Dict[str, Any] = {
        "transactionDate": format_ledger_date(transaction_date),
        "transactionAmount": amount,
        "dateFormat": LEDGER_DATE_FORMAT,
        "locale": LEDGER_LOCALE,
    }
    if payment_type_id is not None:
        body["paymentTypeId"] = payment_type_id
    if note:
        body["note"] = note
    return body


def attendance_request(
    group_id: int,
    meeting_id: int,
    attendance: Mapping[int, str],
) -> LedgerRequest:
    """``attendance`` maps client id to PRESENT / ABSENT / LATE."""

    entries = []
    for client_id, status in attendance.items():
        code = ATTENDANCE_TYPES.get(str(status).upper())
        if code is None:
            raise ValueError(f"Unknown attendance status for client {client_id}: {status!r}")
        entries.append({"clientId": client_id, "attendanceType": code})
    return LedgerRequest(
        OperationKind.ATTENDANCE,
        f"/groups/{group_id}/meetings/{meeting_id}?command=saveAttendance",
        HttpMethod.POST,
        {"clientsAttendance": entries},
    )


def deposit_request(
    account_id: int,
    amount: int | float,
    transaction_date: date | str,
    *,
    note: Optional[str] = None,
    payment_type_id: Optional[int] = None,
) -> LedgerRequest:
    return LedgerRequest(
        OperationKind.DEPOSIT,
        f"/savingsaccounts/{account_id}/transactions?command=deposit",
        HttpMethod.POST,
        _transaction_body(amount, transaction_date, note, payment_type_id),
    )


def repayment_request(
    loan_id: int,
    amount: int | float,
    transaction_date: date | str,
    *,
    note: Optional[str] = None,
    payment_type_id: Optional[int] = None,
) -> LedgerRequest:
    return LedgerRequest(
        OperationKind.REPAYMENT,
        f"/loans/{loan_id}/transactions?command=repayment",
        HttpMethod.POST,
        _transaction_body(amount, transaction_date, note, payment_type_id),
    )


__all__ = [
    "ATTENDANCE_TYPES",
    "LedgerRequest",
    "SHARE_PRICE",
    "attendance_request",
    "deposit_request",
    "repayment_request",
    "share_purchase_amount",
]
