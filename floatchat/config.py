# floatchat/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from floatchat.errors import ConfigError

# ---- Load env ----
load_dotenv(override=False)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    """
    Runtime settings for the dashboard.
    Only the API base URL is required; it is checked when a request is made,
    so a missing value shows up as an error in the UI rather than at import.
    """
    api_url: Optional[str] = None
    request_timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        api_url = (os.getenv("FLOATCHAT_API_URL") or "").strip().rstrip("/")
        try:
            timeout = float(os.getenv("FLOATCHAT_TIMEOUT", DEFAULT_TIMEOUT))
        except ValueError:
            timeout = DEFAULT_TIMEOUT
        return cls(
            api_url=api_url or None,
            request_timeout=timeout,
            log_level=os.getenv("FLOATCHAT_LOG_LEVEL", "INFO").upper(),
        )

    def require_api_url(self) -> str:
        if not self.api_url:
            raise ConfigError(
                "FloatChat API URL is not configured. Set FLOATCHAT_API_URL in .env"
            )
        return self.api_url


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=LOG_FORMAT)
