"""Records exposed by the VSLA meeting sync queue."""
from .outbox_row import OutboxRow
from .queued_operation import HttpMethod, OperationKind, OperationStatus, QueuedOperation

__all__ = ["HttpMethod", "OperationKind", "OperationStatus", "OutboxRow", "QueuedOperation"]
