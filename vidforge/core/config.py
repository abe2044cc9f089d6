"""Environment-driven configuration shared by the web runtime and the bridge host."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping, Optional, Tuple


SUPPORTED_LOCALES: Tuple[str, ...] = (
    "en", "id", "es", "ru", "pt", "fr", "de", "zh",
    "hi", "ar", "ja", "tr", "vi", "th", "el", "it",
)
DEFAULT_LOCALE = "en"


def _env_str(env: Mapping[str, str], name: str, default: str = "") -> str:
    return str(env.get(name, "") or "").strip() or default


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    try:
        return float(_env_str(env, name) or default)
    except ValueError:
        return default


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(_env_str(env, name) or default)
    except ValueError:
        return default


def _env_flag(env: Mapping[str, str], name: str) -> Optional[bool]:
    raw = _env_str(env, name).lower()
    if raw in {"1", "true", "yes", "on"}:
        return True
    if raw in {"0", "false", "no", "off"}:
        return False
    return None


@dataclass(frozen=True)
class AppConfig:
    api_url: str = "http://localhost:8080/api/v1"
    messaging_url: str = "ws://localhost:8000/connection/websocket"
    api_key: str = ""
    api_timeout_seconds: float = 15.0
    static_dir: Path = Path("static")
    origin: str = ""
    secure_cookies: Optional[bool] = None
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    reconnect_min_delay: float = 0.5
    reconnect_max_delay: float = 20.0
    reconnect_max_attempts: int = 8

    @property
    def base_url(self) -> str:
        return self.api_url.rstrip("/")


def load_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Build an AppConfig from ``VIDFORGE_*`` environment variables.

    Args:
        env: Mapping to read instead of ``os.environ`` (used by tests)

    Returns:
        Frozen configuration with defaults for every unset variable
    """
    env = os.environ if env is None else env
    defaults = AppConfig()
    log_file = _env_str(env, "VIDFORGE_LOG_FILE")
    return AppConfig(
        api_url=_env_str(env, "VIDFORGE_API_URL", defaults.api_url).rstrip("/"),
        messaging_url=_env_str(env, "VIDFORGE_MESSAGING_URL", defaults.messaging_url),
        api_key=_env_str(env, "VIDFORGE_API_KEY"),
        api_timeout_seconds=_env_float(env, "VIDFORGE_API_TIMEOUT", defaults.api_timeout_seconds),
        static_dir=Path(_env_str(env, "VIDFORGE_STATIC_DIR", "static")).expanduser(),
        origin=_env_str(env, "VIDFORGE_ORIGIN").rstrip("/"),
        secure_cookies=_env_flag(env, "VIDFORGE_SECURE_COOKIES"),
        log_level=_env_str(env, "VIDFORGE_LOG_LEVEL", defaults.log_level).upper(),
        log_file=Path(log_file).expanduser() if log_file else None,
        reconnect_min_delay=_env_float(env, "VIDFORGE_RECONNECT_MIN_DELAY", defaults.reconnect_min_delay),
        reconnect_max_delay=_env_float(env, "VIDFORGE_RECONNECT_MAX_DELAY", defaults.reconnect_max_delay),
        reconnect_max_attempts=max(1, _env_int(env, "VIDFORGE_RECONNECT_MAX_ATTEMPTS", defaults.reconnect_max_attempts)),
    )
