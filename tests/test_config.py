from pathlib import Path

import pytest
from pydantic import ValidationError

from cielo_gateway.common.config import GatewaySettings, get_settings
from cielo_gateway.tls import TlsVersion


def test_defaults():
    settings = get_settings()

    assert settings.target_charset == "utf-8"
    assert settings.tls_version == TlsVersion.TLSv1_2
    assert settings.connect_timeout == 10.0
    assert settings.timeout == 40.0
    assert settings.exchange_log_path is None


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("CIELO_LOG_DIR", str(tmp_path))
    monkeypatch.setenv("CIELO_TARGET_CHARSET", "latin1")
    monkeypatch.setenv("CIELO_TLS_VERSION", "7")
    get_settings.cache_clear()  # type: ignore[attr-defined]

    settings = get_settings()

    assert settings.target_charset == "iso8859-1"
    assert settings.tls_version is TlsVersion.TLSv1_3
    assert settings.exchange_log_path == Path(tmp_path) / "cielo.log"


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


@pytest.mark.parametrize(
    "overrides",
    [{"target_charset": "klingon"}, {"tls_version": 3}],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValidationError):
        GatewaySettings(**overrides)


def test_log_format_override(monkeypatch):
    monkeypatch.setenv("LOG_FORMAT", "%(levelname)s %(message)s")
    get_settings.cache_clear()  # type: ignore[attr-defined]

    assert get_settings().log_format == "%(levelname)s %(message)s"
