import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# --------------------------------------------------
# Defaults
# --------------------------------------------------

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_REQUEST_TIMEOUT = 20
DEFAULT_RENDER_TIMEOUT = 60000
DEFAULT_MAX_DOCUMENT_BYTES = 5_000_000
DEFAULT_MAX_DEPTH = 64
MAX_DEPTH_LIMIT = 200            # about 3 stack frames per nesting level
DEFAULT_PARSER = "html.parser"


@dataclass(frozen=True)
class Settings:
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    render_timeout: int = DEFAULT_RENDER_TIMEOUT   # milliseconds (playwright)
    max_document_bytes: int = DEFAULT_MAX_DOCUMENT_BYTES
    max_depth: int = DEFAULT_MAX_DEPTH
    parser: str = DEFAULT_PARSER


_SETTINGS: Optional[Settings] = None


# --------------------------------------------------
# Environment helpers
# --------------------------------------------------

def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default

    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default

    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


def _max_depth() -> int:
    value = _env_int("MICROSCOPE_MAX_DEPTH", DEFAULT_MAX_DEPTH)
    if value > MAX_DEPTH_LIMIT:
        logger.warning(f"MICROSCOPE_MAX_DEPTH={value} exceeds {MAX_DEPTH_LIMIT}, clamped")
        return MAX_DEPTH_LIMIT
    return value


def load_settings() -> Settings:
    """
    Build settings from MICROSCOPE_* environment variables
    (a .env file in the working directory is honoured).
    """
    return Settings(
        user_agent=os.getenv("MICROSCOPE_USER_AGENT") or DEFAULT_USER_AGENT,
        request_timeout=_env_float("MICROSCOPE_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        render_timeout=_env_int("MICROSCOPE_RENDER_TIMEOUT", DEFAULT_RENDER_TIMEOUT),
        max_document_bytes=_env_int("MICROSCOPE_MAX_DOCUMENT_BYTES", DEFAULT_MAX_DOCUMENT_BYTES),
        max_depth=_max_depth(),
        parser=os.getenv("MICROSCOPE_PARSER") or DEFAULT_PARSER,
    )


def get_settings() -> Settings:
    """
    Process-wide settings, loaded once.
    """
    global _SETTINGS

    if _SETTINGS is None:
        _SETTINGS = load_settings()

    return _SETTINGS
