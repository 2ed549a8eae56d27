import logging
import os
import re

from rich.logging import RichHandler

_BEARER_RE = re.compile(r"(Bearer\s+)[^\s'\"]+", re.IGNORECASE)


class TokenMaskingFilter(logging.Filter):
    """Replaces bearer tokens in rendered log messages with ``***``."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = _BEARER_RE.sub(r"\1***", message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def _level_from_env() -> int:
    if os.getenv("DEBUG"):
        return logging.DEBUG
    name = os.getenv("SHOP_LOG_LEVEL", "INFO").upper()
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def get_logger(name=None) -> logging.Logger:
    """
    Returns a logger writing through RichHandler.
    Handlers are attached once per name, so calling this at import time is cheap.
    """
    if name is None:
        name = "shop"
    logger = logging.getLogger(name)
    log_level = _level_from_env()
    logger.setLevel(log_level)

    if not logger.handlers:
        handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(logging.Formatter("[%(name)s]  %(message)s"))
        handler.setLevel(log_level)
        handler.addFilter(TokenMaskingFilter())
        logger.addHandler(handler)

        logger.propagate = False
        logger.debug(f"Logger '{name}' ready at level {logging.getLevelName(log_level)}.")

    return logger
