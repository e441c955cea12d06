"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, SecretStr

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class DeliveryConfig(BaseModel):
    """Per-event delivery behaviour."""

    max_concurrency: int = 10
    attempt_timeout_secs: float = 10.0
    invocation_timeout_secs: float = 60.0
    record_max_attempts: int = 3
    record_retry_backoff_secs: float = 0.05


class EmailConfig(BaseModel):
    """SMTP mail transport configuration."""

    enabled: bool = False
    from_address: str = "notifications@localhost"
    smtp_host: str = "localhost"
    smtp_port: int = 587
    username: str = ""
    password: SecretStr = SecretStr("")
    use_starttls: bool = True
    timeout_secs: float = 15.0


class WebhookConfig(BaseModel):
    """Webhook HTTP transport configuration."""

    enabled: bool = True
    timeout_secs: float = 10.0
    user_agent: str = "eventrelay/0.1"


class QueueConfig(BaseModel):
    """Local queue and worker configuration."""

    batch_size: int = 10
    max_receive_count: int = 3
    poll_interval_ms: int = 500


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    delivery: DeliveryConfig = DeliveryConfig()
    email: EmailConfig = EmailConfig()
    webhook: WebhookConfig = WebhookConfig()
    queue: QueueConfig = QueueConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
