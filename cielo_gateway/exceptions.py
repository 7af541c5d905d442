"""Exceptions raised by the gateway exchange."""

from __future__ import annotations


class GatewayError(Exception):
    """Base error for the Cielo gateway client."""


class InvalidArgumentError(GatewayError, ValueError):
    """Raised when a caller supplies a malformed value, such as an endpoint URL."""

    def __init__(self, message: str, value: object | None = None) -> None:
        super().__init__(message)
        self.value = value


class ResourceNotFoundError(GatewayError, LookupError):
    """Raised when an exchange is sent without a required resource."""


__all__ = ["GatewayError", "InvalidArgumentError", "ResourceNotFoundError"]
