"""SQLModel table backing the sync queue."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from datetime_utils import utc_now


class OutboxRow(SQLModel, table=True):
    __tablename__ = "queuedoperation"

    seq: Optional[int] = Field(default=None, primary_key=True)
    id: str = Field(unique=True, index=True)
    kind: str
    endpoint: str
    method: str
    body: str
    created_at: datetime = Field(default_factory=utc_now)
    retry_count: int = Field(default=0)
    status: str = Field(default="PENDING", index=True)
    last_error: Optional[str] = None


__all__ = ["OutboxRow"]
