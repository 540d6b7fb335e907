"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _flag(raw: Optional[str], default: bool) -> bool:
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in FALSE_VALUES


def _path(raw: Optional[str]) -> Optional[Path]:
    if raw is None or not raw.strip():
        return None
    return Path(raw.strip()).expanduser()


@dataclass(frozen=True)
class Settings:
    database_url: str = ""
    gateway_url: str = ""
    token_url: str = ""
    client_id: str = ""
    client_secret: str = ""
    report_dir: Optional[Path] = None
    event_log: Optional[Path] = None
    log_level: str = "INFO"
    seed: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            database_url=env.get("MEDICONNECT_DATABASE_URL", "").strip(),
            gateway_url=env.get("MEDICONNECT_SQL_GATEWAY_URL", "").strip(),
            token_url=env.get("MEDICONNECT_TOKEN_URL", "").strip(),
            client_id=env.get("MEDICONNECT_CLIENT_ID", "").strip(),
            client_secret=env.get("MEDICONNECT_CLIENT_SECRET", "").strip(),
            report_dir=_path(env.get("MEDICONNECT_REPORT_DIR")),
            event_log=_path(env.get("MEDICONNECT_EVENT_LOG")),
            log_level=(env.get("MEDICONNECT_LOG_LEVEL") or "INFO").strip().upper(),
            seed=_flag(env.get("MEDICONNECT_SEED"), True),
        )

    @property
    def store_configured(self) -> bool:
        return bool(self.database_url or self.gateway_url)


__all__ = ["Settings"]
