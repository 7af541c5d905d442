from __future__ import annotations

import ssl
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Any


class TlsVersion(IntEnum):
    """Protocol selector, numbered like the libcurl SSLVERSION option.

    The SSLv2 (2) and SSLv3 (3) selectors are obsolete and not supported.
    """

    DEFAULT = 0
    TLSv1 = 1
    TLSv1_0 = 4
    TLSv1_1 = 5
    TLSv1_2 = 6
    TLSv1_3 = 7


_PINNED_VERSIONS: dict[TlsVersion, tuple[ssl.TLSVersion, ssl.TLSVersion]] = {
    TlsVersion.TLSv1: (ssl.TLSVersion.TLSv1, ssl.TLSVersion.MAXIMUM_SUPPORTED),
    TlsVersion.TLSv1_0: (ssl.TLSVersion.TLSv1, ssl.TLSVersion.TLSv1),
    TlsVersion.TLSv1_1: (ssl.TLSVersion.TLSv1_1, ssl.TLSVersion.TLSv1_1),
    TlsVersion.TLSv1_2: (ssl.TLSVersion.TLSv1_2, ssl.TLSVersion.TLSv1_2),
    TlsVersion.TLSv1_3: (ssl.TLSVersion.TLSv1_3, ssl.TLSVersion.TLSv1_3),
}

_DISABLED_FLAGS = {"", "off"}


@dataclass(frozen=True)
class TlsMode:
    """Whether an exchange verifies the gateway certificate, and how."""

    enabled: bool = False
    version: TlsVersion | None = None
    ca_file: Path | None = None

    @classmethod
    def disabled(cls) -> "TlsMode":
        return cls(enabled=False)

    @classmethod
    def verified(
        cls,
        version: TlsVersion | int | None = None,
        ca_file: Path | str | None = None,
    ) -> "TlsMode":
        return cls(
            enabled=True,
            version=TlsVersion(version) if version is not None else None,
            ca_file=Path(ca_file) if ca_file else None,
        )

    @classmethod
    def coerce(cls, value: Any) -> "TlsMode":
        """Map the legacy send flag onto a TlsMode.

        A non-empty string other than "off" turns verification on; its value
        is not used as a certificate path.
        """
        if isinstance(value, TlsMode):
            return value
        if value is None or value is False:
            return cls.disabled()
        if value is True:
            return cls.verified()
        if isinstance(value, str):
            if value.strip().lower() in _DISABLED_FLAGS:
                return cls.disabled()
            return cls.verified()
        raise TypeError(f"Unsupported TLS mode: {value!r}")


def build_ssl_context(version: TlsVersion, ca_file: Path | None = None) -> ssl.SSLContext:
    """Create a context that verifies peer and hostname, pinned to `version`."""
    context = ssl.create_default_context(cafile=str(ca_file) if ca_file else None)
    pinned = _PINNED_VERSIONS.get(version)
    if pinned is not None:
        context.minimum_version, context.maximum_version = pinned
    context.check_hostname = True
    context.verify_mode = ssl.CERT_REQUIRED
    return context


__all__ = ["TlsVersion", "TlsMode", "build_ssl_context"]
