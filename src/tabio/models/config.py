"""Configuration models for tabio."""

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

CONFIG_FILE_NAME = "tabio.yaml"


def get_home_dir() -> Path:
    """Get the tabio home directory (``$TABIO_HOME_DIR`` or ``~/.tabio``)."""
    return Path(os.environ.get("TABIO_HOME_DIR", str(Path.home() / ".tabio")))


class HTTPConfig(BaseModel):
    """Remote fetch configuration."""

    timeout: float = Field(default=30.0, gt=0, description="Request timeout in seconds")
    user_agent: str = Field(default="tabio", description="User-Agent header for downloads")
    chunk_size: int = Field(default=65536, ge=1024, description="Download chunk size in bytes")


class CSVConfig(BaseModel):
    """Delimited text configuration."""

    detect_encoding: bool = Field(default=True, description="Detect input encoding with chardet")
    encoding: str = Field(default="utf-8", description="Encoding used when detection is off and for output")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    file: Optional[str] = Field(default=None, description="Log file path")
    format: Literal["json", "console"] = Field(default="console", description="Log format")


class TabioConfig(BaseSettings):
    """tabio configuration settings.

    Precedence: init arguments, then ``TABIO_`` environment variables
    (``TABIO_HTTP__TIMEOUT=5``), then ``tabio.yaml`` in the home directory,
    then defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="TABIO_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    compression_formats: list[str] = Field(
        default=["gz", "bz2", "xz", "zip", "tar"],
        description="File suffixes treated as compression wrappers",
    )
    temp_dir: Optional[Path] = Field(
        default=None, description="Directory for staging downloads and archives"
    )
    http: HTTPConfig = Field(default_factory=HTTPConfig)
    csv: CSVConfig = Field(default_factory=CSVConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("compression_formats")
    @classmethod
    def validate_compression_formats(cls, v: list[str]) -> list[str]:
        """Normalize compression suffixes."""
        supported = {"gz", "bz2", "xz", "zip", "tar"}
        normalized = [s.lower().lstrip(".") for s in v]
        unknown = sorted(set(normalized) - supported)
        if unknown:
            raise ValueError(f"Unsupported compression formats: {unknown}. Must be a subset of {sorted(supported)}")
        return normalized

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=get_home_dir() / CONFIG_FILE_NAME),
        )
