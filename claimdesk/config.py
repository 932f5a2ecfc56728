"""
Configuration

Settings are read from environment variables (optionally through a local
``.env`` file) once and cached.
"""
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return max(0.0, float(raw))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the API, the simulated agents and the console."""

    log_level: str = "INFO"
    log_format: str = DEFAULT_LOG_FORMAT
    # Unset means the claim store lives in memory for the process lifetime
    store_path: Optional[str] = None
    # Multiplier on every simulated latency; 0 disables the delays
    latency_scale: float = 1.0
    api_url: str = "http://localhost:8000"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            log_level=os.getenv("CLAIMDESK_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("CLAIMDESK_LOG_FORMAT", DEFAULT_LOG_FORMAT),
            store_path=os.getenv("CLAIMDESK_STORE_PATH") or None,
            latency_scale=_env_float("CLAIMDESK_LATENCY_SCALE", 1.0),
            api_url=os.getenv("CLAIMDESK_API_URL", "http://localhost:8000").rstrip("/"),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
