import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from cielo_gateway.common.config import GatewaySettings, get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep the host environment out of the cached settings."""
    for name in (
        "CIELO_LOG_DIR",
        "CIELO_LOG_FILE",
        "CIELO_TARGET_CHARSET",
        "CIELO_TLS_VERSION",
        "CIELO_CA_FILE",
        "CIELO_CONNECT_TIMEOUT",
        "CIELO_TIMEOUT",
        "LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture
def settings(tmp_path) -> GatewaySettings:
    return GatewaySettings(log_dir=tmp_path)
