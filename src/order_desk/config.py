"""Settings from ``ORDER_DESK_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

PREFIX = "ORDER_DESK_"


@dataclass(frozen=True)
class Settings:
    storage: str = "memory"  # memory | sql
    database_url: str = "sqlite:///./order_desk.db"
    currency: str = "USD"
    order_number_attempts: int = 5
    commit_timeout_seconds: float = 5.0
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    default_store_id: str = "store-1"

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        def get(name: str, default: str) -> str:
            return env.get(PREFIX + name, default).strip() or default

        storage = get("STORAGE", "memory").lower()
        if storage not in {"memory", "sql"}:
            raise ValueError(f"{PREFIX}STORAGE must be 'memory' or 'sql', got {storage!r}")

        attempts = int(get("ORDER_NUMBER_ATTEMPTS", "5"))
        if attempts < 1:
            raise ValueError(f"{PREFIX}ORDER_NUMBER_ATTEMPTS must be >= 1")

        return Settings(
            storage=storage,
            database_url=get("DATABASE_URL", "sqlite:///./order_desk.db"),
            currency=get("CURRENCY", "USD").upper(),
            order_number_attempts=attempts,
            commit_timeout_seconds=float(get("COMMIT_TIMEOUT_SECONDS", "5.0")),
            log_level=get("LOG_LEVEL", "INFO").upper(),
            host=get("HOST", "0.0.0.0"),
            port=int(get("PORT", "8000")),
            default_store_id=get("DEFAULT_STORE_ID", "store-1"),
        )
