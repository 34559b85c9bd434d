from __future__ import annotations

from pydantic import BaseModel, Field


class RuntimeConfig(BaseModel):
    request_timeout_seconds: float = 30.0
    validation_timeout_seconds: float | None = None
    discovery_retry_attempts: int = Field(default=2, ge=1)


class TelemetryConfig(BaseModel):
    log_level: str = "INFO"
    json_logs: bool = True


class ProviderConfig(BaseModel):
    enabled: bool = True
    api_key_env: str | None = None
    base_url: str | None = None
    description: str = ""


class AppConfig(BaseModel):
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)
    providers: dict[str, ProviderConfig] = Field(default_factory=dict)
