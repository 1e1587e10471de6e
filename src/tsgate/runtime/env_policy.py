from __future__ import annotations

import os

AUDIT_WORKERS_ENV = "TSGATE_AUDIT_WORKERS"


def env_text(name: str, *, default: str = "") -> str:
    return os.getenv(name, default).strip()


def env_positive_int(name: str) -> int | None:
    raw = env_text(name)
    if not raw:
        return None
    try:
        parsed = int(raw)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def audit_workers_override() -> int | None:
    return env_positive_int(AUDIT_WORKERS_ENV)
