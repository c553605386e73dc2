"""Centralized application configuration."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import os
import sys


def get_default_data_dir(
    app_name: str,
    *,
    platform: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Return an OS-specific user data directory for ``app_name``.

    ``VSLA_DATA_DIR`` wins over the platform defaults so that a device image
    (or a test run) can pin the outbox to a known location.
    """

    platform_id = (platform or sys.platform).lower()
    environ = dict(env if env is not None else os.environ)
    home_dir = Path(home or Path.home())

    override = environ.get("VSLA_DATA_DIR")
    if override:
        return Path(override).expanduser()

    sanitized = app_name.strip() or "app"
    sanitized = sanitized.replace("/", "-").replace("\\", "-")

    if platform_id.startswith("win"):
        base = Path(environ.get("APPDATA") or home_dir / "AppData" / "Roaming")
    elif platform_id == "darwin":
        base = Path(home_dir / "Library" / "Application Support")
    else:
        base = Path(environ.get("XDG_DATA_HOME") or home_dir / ".local" / "share")

    return base.expanduser() / sanitized


APP_NAME = "VSLA Meeting"


DATA_DIR = get_default_data_dir(APP_NAME)
LOG_DIR = DATA_DIR / "logs"

for _dir in (DATA_DIR, LOG_DIR):
    _dir.mkdir(parents=True, exist_ok=True)


DB_PATH = DATA_DIR / "outbox.db"
CONFIG_PATH = DATA_DIR / "config.json"
QUEUE_JSON_PATH = DATA_DIR / "sync_queue.json"
SYNC_LOG_PATH = LOG_DIR / "sync.log"


@dataclass(frozen=True)
class SyncSettings:
    # failed delivery attempts before an operation is parked as FAILED
    retry_ceiling: int = 3
    request_timeout_sec: float = 30.0
    pending_poll_interval_sec: int = 1
    auto_drain_enabled: bool = True
    auto_drain_interval_sec: int = 60
    storage_key: str = "vsla_sync_queue"


SYNC = SyncSettings()


@dataclass(frozen=True)
class LedgerSettings:
    base_url: str = os.environ.get(
        "VSLA_LEDGER_URL", "https://demo.fineract.dev/fineract-provider/api/v1"
    )
    tenant: str = os.environ.get("VSLA_LEDGER_TENANT", "default")
    username: str = os.environ.get("VSLA_LEDGER_USERNAME", "mifos")
    password_env: str = "VSLA_LEDGER_PASSWORD"


LEDGER = LedgerSettings()


@dataclass(frozen=True)
class UISettings:
    app_title: str = APP_NAME
    theme_mode: str = "system"
    color_scheme_seed: str = "#0F766E"
    window_min_width: int = 360
    window_min_height: int = 560


UI = UISettings()


__all__ = [
    "APP_NAME",
    "DATA_DIR",
    "LOG_DIR",
    "DB_PATH",
    "CONFIG_PATH",
    "QUEUE_JSON_PATH",
    "SYNC_LOG_PATH",
    "SYNC",
    "LEDGER",
    "UI",
    "get_default_data_dir",
]
