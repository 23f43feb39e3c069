"""
Runtime configuration.

Values come from the environment (a .env file is loaded by the API and CLI
entry points before this module is used).
"""

import os
from dataclasses import dataclass


DEFAULT_MODEL = "claude-opus-4-5-20251101"


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class Settings:
    """Settings for the extraction service."""
    anthropic_api_key: str | None = None
    model: str = DEFAULT_MODEL
    max_tokens: int = 8192
    max_upload_mb: int = 50
    slow_threshold_seconds: int = 30  # When the "taking longer" message kicks in
    api_timeout: int = 300            # Seconds per API call
    log_level: str = "INFO"

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""
        return cls(
            anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY") or None,
            model=os.environ.get("FINEXTRACT_MODEL") or DEFAULT_MODEL,
            max_tokens=_env_int("FINEXTRACT_MAX_TOKENS", 8192),
            max_upload_mb=_env_int("FINEXTRACT_MAX_UPLOAD_MB", 50),
            slow_threshold_seconds=_env_int("FINEXTRACT_SLOW_THRESHOLD_SECONDS", 30),
            api_timeout=_env_int("FINEXTRACT_API_TIMEOUT", 300),
            log_level=(os.environ.get("FINEXTRACT_LOG_LEVEL") or "INFO").upper(),
        )
