"""Simple JSON-backed configuration store."""
from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from core.settings import CONFIG_PATH, LEDGER


@dataclass
class LedgerConfig:
    """Ledger connection details persisted to ``config.json``.

    The password is never written to disk; it is read from the environment
    variable named by ``LEDGER.password_env``.
    """

    base_url: str = LEDGER.base_url
    tenant: str = LEDGER.tenant
    username: str = LEDGER.username

    @property
    def password(self) -> str:
        return os.environ.get(LEDGER.password_env, "")


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _load_raw(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def load_config(path: Optional[Path] = None) -> LedgerConfig:
    target = path or CONFIG_PATH
    data = _load_raw(target)
    defaults = LedgerConfig()
    return LedgerConfig(
        base_url=data.get("base_url") or defaults.base_url,
        tenant=data.get("tenant") or defaults.tenant,
        username=data.get("username") or defaults.username,
    )


def save_config(config: LedgerConfig, path: Optional[Path] = None) -> None:
    target = path or CONFIG_PATH
    _ensure_parent(target)
    payload = json.dumps(asdict(config), ensure_ascii=False, indent=2, sort_keys=True)
    tmp = target.with_suffix(".tmp")
    try:
        tmp.write_text(payload, encoding="utf-8")
        tmp.replace(target)
    finally:
        if tmp.exists():
            try:
                tmp.unlink()
            except OSError:
                pass


def update_config(path: Optional[Path] = None, **changes: Any) -> LedgerConfig:
    target = path or CONFIG_PATH
    cfg = load_config(target)
    known = {f.name for f in fields(LedgerConfig)}
    for key, value in changes.items():
        if key in known:
            setattr(cfg, key, value)
    save_config(cfg, target)
    return cfg


__all__ = ["LedgerConfig", "load_config", "save_config", "update_config"]
