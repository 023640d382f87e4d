"""Configuration loading for the event exporter."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

from .models import EnhancedEvent


class TLSConfig(BaseModel):
    """Transport security settings of a sink."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    insecure_skip_verify: bool = Field(
        default=False, alias="insecureSkipVerify",
        description="Skip server certificate verification"
    )
    server_name: str = Field(default="", alias="serverName", description="Override for the TLS server name (SNI)")
    ca_file: Path | None = Field(default=None, alias="caFile", description="CA bundle used instead of system roots")
    cert_file: Path | None = Field(default=None, alias="certFile", description="Client certificate")
    key_file: Path | None = Field(default=None, alias="keyFile", description="Client private key")


class LokiConfig(BaseModel):
    """Loki sink configuration."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    url: str = Field(description="Loki push endpoint, e.g. http://loki:3100/loki/api/v1/push")
    layout: dict[str, Any] = Field(
        default_factory=dict,
        description="Log line body: field name to literal, template, or nested layout"
    )
    stream_labels: dict[str, str] = Field(
        default_factory=dict, alias="streamLabels",
        description="Stream labels: label name to literal or template"
    )
    headers: dict[str, str] = Field(default_factory=dict, description="Extra request headers, templated per event")
    ignore_namespaces: list[str] = Field(default_factory=list, description="Namespaces whose events are dropped")
    tls: TLSConfig = Field(default_factory=TLSConfig)

    @field_validator("layout", "stream_labels", "headers", mode="before")
    @classmethod
    def _empty_mapping(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("ignore_namespaces", mode="before")
    @classmethod
    def _empty_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("tls", mode="before")
    @classmethod
    def _default_tls(cls, value: Any) -> Any:
        return TLSConfig() if value is None else value


class ReceiverConfig(BaseModel):
    """A named receiver; each receiver configures one sink."""
    name: str = Field(description="Receiver name, used as the sink ID")
    loki: LokiConfig | None = Field(default=None, description="Loki sink settings")


class ExporterConfig(BaseModel):
    """Top-level exporter configuration file."""
    model_config = ConfigDict(populate_by_name=True)

    cluster_name: str = Field(default="", alias="clusterName", description="Stamped on events that carry none")
    receivers: list[ReceiverConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_receivers(self) -> "ExporterConfig":
        names = [r.name for r in self.receivers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate receiver names: {', '.join(duplicates)}")
        return self


class Settings(BaseSettings):
    """Process settings loaded from environment."""

    config_file: Path = Field(default=Path("/etc/eventexporter/config.yaml"))
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True)

    model_config = {"env_prefix": "EVENTEXPORTER_", "env_file": ".env"}


def load_exporter_config(config_path: Path) -> ExporterConfig:
    """Load the exporter configuration from a YAML file."""
    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return ExporterConfig(**(data or {}))


def load_event(event_path: Path) -> EnhancedEvent:
    """Load a single event from a JSON or YAML file."""
    with open(event_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return EnhancedEvent.model_validate(data or {})
