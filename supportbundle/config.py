"""Configuration module: frozen dataclass loaded from environment variables and optional YAML."""

import logging
import os
from dataclasses import dataclass, field, replace

import yaml

from supportbundle.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_SENSITIVE_KEYS = (
    "password",
    "passwd",
    "secret",
    "token",
    "api_key",
    "apikey",
    "key",
    "credential",
    "auth",
    "private",
)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes")


def _parse_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    app_name: str = "app"
    version: str = "0.1.0"
    config_path: str = "."
    data_path: str = "."
    output_dir: str = "."
    service_name: str = ""
    journal_timeout: float = 30.0
    log_duration_hours: float = 24.0
    max_log_size_bytes: int = 10 * 1024 * 1024  # 10 MB
    include_config: bool = True
    include_system_info: bool = True
    sensitive_keys: tuple[str, ...] = field(default=DEFAULT_SENSITIVE_KEYS)

    @property
    def journal_unit(self) -> str:
        """systemd unit queried for journal logs."""
        return self.service_name or f"{self.app_name}.service"


def load_settings() -> Settings:
    """Build Settings from SUPPORT_* environment variables with sensible defaults."""
    raw_keys = os.environ.get("SUPPORT_SENSITIVE_KEYS")
    return Settings(
        app_name=os.environ.get("SUPPORT_APP_NAME", Settings.app_name),
        version=os.environ.get("SUPPORT_VERSION", Settings.version),
        config_path=os.environ.get("SUPPORT_CONFIG_PATH", Settings.config_path),
        data_path=os.environ.get("SUPPORT_DATA_PATH", Settings.data_path),
        output_dir=os.environ.get("SUPPORT_OUTPUT_DIR", Settings.output_dir),
        service_name=os.environ.get("SUPPORT_SERVICE_NAME", Settings.service_name),
        journal_timeout=_env_number(
            "SUPPORT_JOURNAL_TIMEOUT", Settings.journal_timeout, float
        ),
        log_duration_hours=_env_number(
            "SUPPORT_LOG_DURATION_HOURS", Settings.log_duration_hours, float
        ),
        max_log_size_bytes=_env_number(
            "SUPPORT_MAX_LOG_SIZE_BYTES", Settings.max_log_size_bytes, int
        ),
        include_config=_parse_bool(os.environ.get("SUPPORT_INCLUDE_CONFIG", "true")),
        include_system_info=_parse_bool(
            os.environ.get("SUPPORT_INCLUDE_SYSTEM_INFO", "true")
        ),
        sensitive_keys=_parse_list(raw_keys) if raw_keys else DEFAULT_SENSITIVE_KEYS,
    )


def load_yaml_settings(path: str | None, base: Settings | None = None) -> Settings:
    """Overlay settings from a YAML file onto *base*. Missing file keeps *base* unchanged."""
    base = base or load_settings()
    if not path:
        return base
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Settings file %s not found, using defaults", path)
        return base
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid YAML in settings file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"settings file {path} must contain a mapping")

    known = {k: v for k, v in data.items() if k in Settings.__dataclass_fields__}
    unknown = sorted(set(data) - set(known))
    if unknown:
        logger.warning("Ignoring unknown settings in %s: %s", path, ", ".join(unknown))
    if "sensitive_keys" in known:
        known["sensitive_keys"] = tuple(known["sensitive_keys"])
    logger.info("Loaded settings from %s", path)
    return replace(base, **known)
