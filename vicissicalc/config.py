import logging
import os
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from vicissicalc.models import Settings


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build Settings from the environment, after loading .env (CWD or *env_file*)."""
    load_dotenv(env_file or find_dotenv(usecwd=True))
    return Settings(
        rows=_get_int("VICISSICALC_ROWS", 20),
        cols=_get_int("VICISSICALC_COLS", 4),
        col_width=_get_int("VICISSICALC_COL_WIDTH", 18),
        log_level=os.getenv("VICISSICALC_LOG_LEVEL", "WARNING").upper(),
        log_file=os.getenv("VICISSICALC_LOG_FILE") or None,
        host=os.getenv("VICISSICALC_HOST", "127.0.0.1"),
        port=_get_int("VICISSICALC_PORT", 8000),
    )


def configure_logging(settings: Settings, *, console: bool = False) -> None:
    """Set up the 'vicissicalc' logger.

    The terminal UI owns the screen, so it logs to the configured file only;
    the server also logs to stderr (console=True).
    """
    logger = logging.getLogger("vicissicalc")
    logger.setLevel(getattr(logging, settings.log_level, logging.WARNING))
    if logger.hasHandlers():
        logger.handlers.clear()
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    if console:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)
    if not logger.handlers:
        logger.addHandler(logging.NullHandler())
    logger.propagate = False
