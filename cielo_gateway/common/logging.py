from __future__ import annotations

import logging
import sys
from pathlib import Path

EXCHANGE_LOG_DELIMITER = "\r\n====================================\r\n"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_HANDLER_MARKER = "_cielo_gateway_handler"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO", fmt: str = DEFAULT_LOG_FORMAT) -> None:
    """Route stdlib logging to stdout.

    Only the stdout handler installed by an earlier call is replaced; handlers
    attached by the host application are left in place.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for existing in list(root_logger.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            root_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S"))
    setattr(handler, _HANDLER_MARKER, True)
    root_logger.addHandler(handler)


def append_exchange_log(path: Path | None, payload: str | None) -> bool:
    """
    Append a delimited payload to the exchange log file.

    Writes are fire-and-forget: any failure is reported at DEBUG level and
    swallowed. Returns True when the payload was written.
    """
    if path is None:
        return False
    try:
        with open(path, "a", encoding="utf-8", errors="replace", newline="") as handle:
            handle.write(EXCHANGE_LOG_DELIMITER + (payload or ""))
    except Exception as exc:
        logger.debug("Could not append to exchange log %s: %s", path, exc)
        return False
    return True


__all__ = ["configure_logging", "append_exchange_log", "EXCHANGE_LOG_DELIMITER"]
