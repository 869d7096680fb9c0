"""Environment-driven configuration."""

import os
from typing import Optional


DEFAULT_TABLE_NAME = "todos"
DEFAULT_WEBHOOK_TIMEOUT_SECONDS = 5.0


def get_supabase_credentials() -> tuple[Optional[str], Optional[str]]:
    """Return (SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY), stripped."""
    url = os.environ.get("SUPABASE_URL", "").strip() or None
    key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY", "").strip() or None
    return url, key


def get_table_name() -> str:
    return os.environ.get("TODOS_TABLE", "").strip() or DEFAULT_TABLE_NAME


def _get_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def get_storage_timeout_seconds() -> Optional[float]:
    """Per-call Supabase timeout; None means wait indefinitely."""
    return _get_float("STORAGE_TIMEOUT_SECONDS", None)


def get_webhook_url() -> Optional[str]:
    return os.environ.get("WEBHOOK_URL", "").strip() or None


def get_webhook_timeout_seconds() -> float:
    return _get_float("WEBHOOK_TIMEOUT_SECONDS", DEFAULT_WEBHOOK_TIMEOUT_SECONDS)


def is_production() -> bool:
    """Check if running in production (error detail is suppressed)."""
    env = os.environ.get("ENVIRONMENT") or os.environ.get("NODE_ENV", "")
    return env.strip().lower() == "production"
