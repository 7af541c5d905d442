"""Shared helpers used by the gateway exchange."""

from .config import GatewaySettings, get_settings
from .logging import append_exchange_log, configure_logging

__all__ = ["GatewaySettings", "get_settings", "configure_logging", "append_exchange_log"]
