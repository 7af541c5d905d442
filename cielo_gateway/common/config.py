from functools import lru_cache
from pathlib import Path
from typing import Literal
import codecs

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cielo_gateway.common.logging import DEFAULT_LOG_FORMAT
from cielo_gateway.tls import TlsVersion


class GatewaySettings(BaseSettings):
    """Centralised configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    app_env: Literal["local", "dev", "prod"] = Field(default="local", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default=DEFAULT_LOG_FORMAT, alias="LOG_FORMAT")

    # Exchange log sink; no file is written while log_dir is unset
    log_dir: Path | None = Field(default=None, alias="CIELO_LOG_DIR")
    log_file_name: str = Field(default="cielo.log", alias="CIELO_LOG_FILE")

    target_charset: str = Field(default="utf-8", alias="CIELO_TARGET_CHARSET")
    tls_version: int = Field(default=TlsVersion.TLSv1_2, alias="CIELO_TLS_VERSION")
    ca_file: Path | None = Field(default=None, alias="CIELO_CA_FILE")

    connect_timeout: float = Field(default=10.0, alias="CIELO_CONNECT_TIMEOUT")
    timeout: float = Field(default=40.0, alias="CIELO_TIMEOUT")

    @field_validator("target_charset")
    @classmethod
    def validate_charset(cls, value: str) -> str:
        try:
            return codecs.lookup(value).name
        except LookupError as exc:
            raise ValueError(f"Unknown charset: {value}") from exc

    @field_validator("tls_version")
    @classmethod
    def validate_tls_version(cls, value: int) -> TlsVersion:
        try:
            return TlsVersion(value)
        except ValueError as exc:
            raise ValueError(f"Unsupported TLS version selector: {value}") from exc

    @property
    def exchange_log_path(self) -> Path | None:
        if self.log_dir is None:
            return None
        return Path(self.log_dir) / self.log_file_name


@lru_cache(maxsize=1)
def get_settings() -> GatewaySettings:
    return GatewaySettings()
