"""Settings for the warehouse client layer."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WarehouseSettings(BaseSettings):
    """
    Process-wide settings for warehouse clients.

    Connection parameters are never read from here; they always come from
    the credentials a client is built with.
    """

    model_config = SettingsConfigDict(
        env_prefix="WAREHOUSES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Minimum log level")
    log_format: str = Field(
        default="json", pattern="^(json|console)$", description="json or console"
    )
    enable_tracing_integration: bool = Field(
        default=True, description="Add OpenTelemetry trace ids to log entries"
    )
    sql_log_max_chars: int = Field(
        default=200,
        ge=0,
        description="Characters of SQL text included in logs, 0 disables",
    )


_warehouse_settings: WarehouseSettings | None = None


def get_settings() -> WarehouseSettings:
    """Get the warehouse settings singleton."""
    global _warehouse_settings

    if _warehouse_settings is None:
        _warehouse_settings = WarehouseSettings()

    return _warehouse_settings


def configure_settings(settings: WarehouseSettings | None) -> None:
    """Replace the settings singleton; None reloads from the environment."""
    global _warehouse_settings
    _warehouse_settings = settings
