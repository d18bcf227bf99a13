"""Application configuration for DeepBank Terminal.

Values come from ``config.json`` in the application directory and are then
overridden by ``DEEPBANK_*`` environment variables.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import time
from pathlib import Path
from typing import Any

from deepbank.shared.loading import LoadingConfig
from deepbank.shared.network import RetryConfig, TimeoutConfig
from deepbank.shared.validation import OperatingHours

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"


class ConfigError(Exception):
    pass


def resolve_app_dir(app_dir: str | Path | None = None) -> Path:
    if app_dir:
        return Path(app_dir).expanduser()

    env_dir = os.getenv("DEEPBANK_DIR")
    if env_dir:
        return Path(env_dir).expanduser()

    return Path.home() / ".config" / "deepbank"


def _parse_time(value: str) -> time:
    hours, minutes = value.split(":", 1)
    return time(int(hours), int(minutes))


@dataclass
class AppConfig:
    backend_url: str = ""
    api_key: str = ""
    app_dir: Path = field(default_factory=resolve_app_dir)
    loading: LoadingConfig = field(default_factory=LoadingConfig)
    timeout_config: TimeoutConfig = field(default_factory=TimeoutConfig)
    retry_config: RetryConfig = field(default_factory=RetryConfig)
    operating_hours: OperatingHours = field(default_factory=OperatingHours)
    prefer_osc52: bool = False

    @property
    def is_configured(self) -> bool:
        return bool(self.backend_url and self.api_key)

    def require_backend(self) -> None:
        if not self.is_configured:
            raise ConfigError(
                "Backend is not configured. Set DEEPBANK_BACKEND_URL and "
                f"DEEPBANK_API_KEY or edit {self.app_dir / CONFIG_FILENAME}"
            )

    def apply(self, data: dict[str, Any]) -> None:
        self.backend_url = data.get("backend_url", self.backend_url)
        self.api_key = data.get("api_key", self.api_key)
        self.prefer_osc52 = bool(data.get("prefer_osc52", self.prefer_osc52))

        loading = data.get("loading", {})
        if "timeout_seconds" in loading:
            self.loading.timeout_seconds = float(loading["timeout_seconds"])
        if "banner_seconds" in loading:
            self.loading.banner_seconds = float(loading["banner_seconds"])
        if "counted" in loading:
            self.loading.counted = bool(loading["counted"])

        network = data.get("network", {})
        if "connect_timeout" in network:
            self.timeout_config.connect_timeout = float(network["connect_timeout"])
        if "read_timeout" in network:
            self.timeout_config.read_timeout = float(network["read_timeout"])
        if "max_retries" in network:
            self.retry_config.max_retries = int(network["max_retries"])

        hours = data.get("operating_hours", {})
        if hours:
            self.operating_hours = OperatingHours(
                opens=_parse_time(hours.get("opens", "09:00")),
                closes=_parse_time(hours.get("closes", "21:00")),
                timezone=hours.get("timezone", self.operating_hours.timezone),
            )

    def apply_environment(self) -> None:
        self.backend_url = os.getenv("DEEPBANK_BACKEND_URL", self.backend_url)
        self.api_key = os.getenv("DEEPBANK_API_KEY", self.api_key)

        timezone = os.getenv("DEEPBANK_TIMEZONE")
        if timezone:
            self.operating_hours = OperatingHours(
                opens=self.operating_hours.opens,
                closes=self.operating_hours.closes,
                timezone=timezone,
            )

        loading_timeout = os.getenv("DEEPBANK_LOADING_TIMEOUT")
        if loading_timeout:
            try:
                self.loading.timeout_seconds = float(loading_timeout)
            except ValueError:
                logger.warning("Ignoring invalid DEEPBANK_LOADING_TIMEOUT=%r", loading_timeout)

    @classmethod
    def load(cls, app_dir: str | Path | None = None) -> "AppConfig":
        config = cls(app_dir=resolve_app_dir(app_dir))
        config_file = config.app_dir / CONFIG_FILENAME
        if config_file.exists():
            try:
                with open(config_file, "r", encoding="utf-8") as f:
                    config.apply(json.load(f))
            except (OSError, ValueError) as e:
                raise ConfigError(f"Failed to read {config_file}: {e}") from e
        config.apply_environment()
        return config

    def save(self) -> Path:
        self.app_dir.mkdir(parents=True, exist_ok=True)
        config_file = self.app_dir / CONFIG_FILENAME
        data = {
            "backend_url": self.backend_url,
            "prefer_osc52": self.prefer_osc52,
            "loading": {
                "timeout_seconds": self.loading.timeout_seconds,
                "banner_seconds": self.loading.banner_seconds,
                "counted": self.loading.counted,
            },
            "network": {
                "connect_timeout": self.timeout_config.connect_timeout,
                "read_timeout": self.timeout_config.read_timeout,
                "max_retries": self.retry_config.max_retries,
            },
            "operating_hours": {
                "opens": f"{self.operating_hours.opens:%H:%M}",
                "closes": f"{self.operating_hours.closes:%H:%M}",
                "timezone": self.operating_hours.timezone,
            },
        }
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        return config_file
