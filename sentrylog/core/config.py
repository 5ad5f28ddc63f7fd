"""
sentrylog Configuration

Layered configuration for the Sentry adaptor. Layers are merged in order,
later layers winning:

    1. Built-in defaults
    2. YAML file (``sentry:`` block)
    3. Environment variables

The merged result is resolved once (placeholders, proxy collapsing) and
frozen before the adaptor reads it.

Example ``sentry.yml``:

    sentry:
      custom_stacktrace: false
      log_level: warning
      opts:
        dsn: "`SENTRY_DSN`"
        http_proxy:
          host: "`PROXY_HOST`"
          port: 8080
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sentrylog.core.severity import process_severity
from sentrylog.core.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_FILES = [
    "sentry.yml",
    "sentry.yaml",
    ".sentry.yml",
]

CONFIG_FILE_ENV = "SENTRYLOG_CONFIG"

# Environment variable -> option name under ``opts``
ENV_OPTIONS = {
    "SENTRY_DSN": "dsn",
    "SENTRY_ENVIRONMENT": "environment",
    "SENTRY_RELEASE": "release",
}

# Environment variable -> top-level setting
ENV_SETTINGS = {
    "SENTRYLOG_CUSTOM_STACKTRACE": "custom_stacktrace",
    "SENTRYLOG_LOG_LEVEL": "log_level",
}

PROXY_OPTIONS = ("http_proxy", "https_proxy")

DEFAULT_OPTIONS: dict[str, Any] = {
    # The log writer is the only route from logging into Sentry
    "default_integrations": False,
    "auto_enabling_integrations": False,
}

# A whole value of the form `NAME` refers to the environment variable NAME
_PLACEHOLDER = re.compile(r"^`([A-Za-z_][A-Za-z0-9_]*)`$")


class SentryConfig(BaseModel):
    """Resolved, immutable adaptor configuration."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    custom_stacktrace: bool = Field(
        default=False,
        description="Build stacktraces in the log writer instead of the SDK",
    )
    log_level: str = Field(default="warning", description="Log writer threshold")
    opts: dict[str, Any] = Field(
        default_factory=lambda: dict(DEFAULT_OPTIONS),
        description="Options passed to sentry_sdk.Client",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: Any) -> str:
        return process_severity(value)

    @property
    def log_level_number(self) -> int:
        """The log writer threshold as a stdlib logging level."""
        return {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warning": logging.WARNING,
            "error": logging.ERROR,
            "fatal": logging.CRITICAL,
        }[self.log_level]


def load_config(
    config_file: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> SentryConfig:
    """
    Load configuration from all layers.

    Args:
        config_file: Path to a YAML file. If None, SENTRYLOG_CONFIG and the
            default file names are tried.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        Frozen SentryConfig with resolved options.

    Raises:
        ConfigurationError: If a layer cannot be read or the result is invalid.
    """
    environ = os.environ if environ is None else environ

    config_dict: dict[str, Any] = {"opts": dict(DEFAULT_OPTIONS)}

    file_config = _load_config_file(_get_config_file_path(config_file, environ))
    if file_config:
        config_dict = _deep_merge(config_dict, file_config)

    env_config = _load_env_config(environ)
    if env_config:
        config_dict = _deep_merge(config_dict, env_config)
        logger.debug("env_overrides_applied", keys=sorted(env_config))

    config_dict = resolve_placeholders(config_dict, environ)
    config_dict["opts"] = collapse_proxies(config_dict.get("opts") or {})

    try:
        return SentryConfig(**config_dict)
    except ValidationError as e:
        error_msg = f"Configuration validation failed: {e}"
        logger.error("config_validation_failed", error=str(e))
        raise ConfigurationError(error_msg) from e


def resolve_placeholders(value: Any, environ: Mapping[str, str]) -> Any:
    """Replace `NAME` string values with the environment variable NAME."""
    if isinstance(value, Mapping):
        return {key: resolve_placeholders(item, environ) for key, item in value.items()}
    if isinstance(value, list):
        return [resolve_placeholders(item, environ) for item in value]
    if isinstance(value, str):
        match = _PLACEHOLDER.match(value.strip())
        if match:
            name = match.group(1)
            if name not in environ:
                logger.debug("placeholder_unset", variable=name)
            return environ.get(name)
    return value


def collapse_proxies(opts: Mapping[str, Any]) -> dict[str, Any]:
    """
    Collapse structured proxy settings into ``host:port`` strings.

    A mapping with both ``host`` and ``port`` becomes ``"host:port"``, or
    ``"scheme://host:port"`` when a ``scheme`` is given. Anything else is
    left as is.
    """
    opts = dict(opts)
    for name in PROXY_OPTIONS:
        proxy = opts.get(name)
        if isinstance(proxy, Mapping) and proxy.get("host") and proxy.get("port"):
            address = f"{proxy['host']}:{proxy['port']}"
            if proxy.get("scheme"):
                address = f"{proxy['scheme']}://{address}"
            opts[name] = address
    return opts


def _get_config_file_path(
    config_file: str | Path | None, environ: Mapping[str, str]
) -> Path | None:
    if config_file:
        return Path(config_file)

    if environ.get(CONFIG_FILE_ENV):
        return Path(environ[CONFIG_FILE_ENV])

    for filename in DEFAULT_CONFIG_FILES:
        path = Path.cwd() / filename
        if path.exists():
            return path

    return None


def _load_config_file(config_file: Path | None) -> dict[str, Any] | None:
    """Load the ``sentry`` block from a YAML file."""
    if config_file is None or not config_file.exists():
        logger.debug("config_file_not_found", path=str(config_file) if config_file else None)
        return None

    try:
        with open(config_file, encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except yaml.YAMLError as e:
        error_msg = f"Invalid YAML in {config_file}: {e}"
        logger.error("config_file_invalid_yaml", path=str(config_file))
        raise ConfigurationError(error_msg) from e
    except OSError as e:
        error_msg = f"Failed to read {config_file}: {e}"
        logger.error("config_file_unreadable", path=str(config_file), error=str(e))
        raise ConfigurationError(error_msg) from e

    if document is None:
        return None

    if isinstance(document, Mapping) and "sentry" in document:
        document = document["sentry"]

    if not isinstance(document, Mapping):
        raise ConfigurationError(f"Configuration in {config_file} must be a mapping")

    if document.get("opts") is not None and not isinstance(document["opts"], Mapping):
        raise ConfigurationError(f"'opts' in {config_file} must be a mapping")

    logger.debug("config_file_loaded", path=str(config_file))
    return dict(document)


def _load_env_config(environ: Mapping[str, str]) -> dict[str, Any]:
    """Collect environment variable overrides."""
    env_config: dict[str, Any] = {}

    opts = {
        option: environ[variable]
        for variable, option in ENV_OPTIONS.items()
        if environ.get(variable)
    }
    if opts:
        env_config["opts"] = opts

    for variable, setting in ENV_SETTINGS.items():
        if environ.get(variable):
            env_config[setting] = environ[variable]

    return env_config


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Merge override into base; nested mappings merge, other values replace."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), Mapping):
            result[key] = _deep_merge(dict(result[key]), value)
        else:
            result[key] = value
    return result
