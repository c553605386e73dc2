"""HTTP delivery of queued operations to the remote ledger."""

from __future__ import annotations

import json
import logging
from typing import Dict, Optional

import requests

from core.settings import SYNC
from models.queued_operation import QueuedOperation
from storage.config import LedgerConfig

logger = logging.getLogger(__name__)

TENANT_HEADER = "Fineract-Platform-TenantId"


class DeliveryError(Exception):
    """The ledger answered, but not with an acceptance-class status."""

    def __init__(self, status_code: int, detail: str = ""):
        self.status_code = status_code
        self.detail = detail
        message = f"HTTP {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class LedgerClient:
    def __init__(
        self,
        config: Optional[LedgerConfig] = None,
        *,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config or LedgerConfig()
        self.timeout = SYNC.request_timeout_sec if timeout is None else timeout
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        self.session = session or requests.Session()

    def resolve_url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.config.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            TENANT_HEADER: self.config.tenant,
        }

    def deliver(self, operation: QueuedOperation) -> bool:
        """Send one queued operation.

        Returns ``True`` on any 2xx answer. Rejections raise
        :class:`DeliveryError`; connection problems and timeouts raise the
        underlying ``requests`` exception.
        """

        url = self.resolve_url(operation.endpoint)
        auth = None
        if self.config.username:
            auth = (self.config.username, self.config.password)
        response = self.session.request(
            operation.method.value,
            url,
            data=json.dumps(operation.body, ensure_ascii=False).encode("utf-8"),
            headers=self._headers(),
            auth=auth,
            timeout=self.timeout,
        )
        if 200 <= response.status_code < 300:
            logger.debug("%s %s -> %s", operation.method.value, url, response.status_code)
            return True
        detail = (response.text or "").strip()[:200]
        raise DeliveryError(response.status_code, detail)

    def close(self) -> None:
        self.session.close()


__all__ = ["DeliveryError", "LedgerClient", "TENANT_HEADER"]
