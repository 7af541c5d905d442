"""Client for the Cielo XML payment-gateway webservice."""

from .exceptions import GatewayError, InvalidArgumentError, ResourceNotFoundError
from .exchange import GatewayExchange
from .tls import TlsMode, TlsVersion

__all__ = [
    "GatewayExchange",
    "GatewayError",
    "InvalidArgumentError",
    "ResourceNotFoundError",
    "TlsMode",
    "TlsVersion",
]
