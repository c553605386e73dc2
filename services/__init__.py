"""Sync queue, ledger delivery and scheduling services."""
