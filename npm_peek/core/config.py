"""
Runtime configuration.

Settings are resolved in three layers, later layers winning:
* built-in defaults (the two registry presets, ``blue`` active);
* an optional YAML file named by ``NPM_PEEK_CONFIG``;
* individual environment overrides (``NPM_PEEK_REGISTRY``, ``NPM_PEEK_TIMEOUT``).

The active registry is a plain field on the settings object that callers
pass around; there is no module-level setter.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from npm_peek.domain.errors import UnknownRegistry
from npm_peek.domain.models import DEFAULT_REGISTRY, REGISTRY_URLS, Registry

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV_VAR = "NPM_PEEK_CONFIG"
REGISTRY_ENV_VAR = "NPM_PEEK_REGISTRY"
TIMEOUT_ENV_VAR = "NPM_PEEK_TIMEOUT"


class Settings(BaseModel):
    """Configuration shared by the registry client, retriever and facade."""

    registries: Dict[str, str] = Field(
        default_factory=lambda: dict(REGISTRY_URLS),
        description="Registry preset name -> base URL.",
    )
    default_registry: Registry = Field(
        default=DEFAULT_REGISTRY,
        description="Registry used when a call does not name one.",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to every registry and tarball request.",
    )
    max_archive_bytes: Optional[int] = Field(
        default=None,
        gt=0,
        description="Upper bound on the decompressed tarball size. None disables the check.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level used by the web application.",
    )

    @field_validator("registries")
    @classmethod
    def _known_registries_only(cls, value: Dict[str, str]) -> Dict[str, str]:
        # Keys must be preset names; nothing can select any other key.
        unknown = sorted(set(value) - {r.value for r in Registry})
        if unknown:
            raise ValueError(f"unknown registry names {unknown}, expected one of {[r.value for r in Registry]}")
        return value

    def registry_url(self, registry: Optional[Union[Registry, str]] = None) -> str:
        """Base URL for ``registry``, or for the default registry when omitted."""
        selected = coerce_registry(registry) if registry is not None else self.default_registry
        try:
            return self.registries[selected.value].rstrip("/")
        except KeyError:
            raise UnknownRegistry(selected.value)


def coerce_registry(value: Union[Registry, str]) -> Registry:
    if isinstance(value, Registry):
        return value
    try:
        return Registry(str(value).strip().lower())
    except ValueError:
        raise UnknownRegistry(str(value))


def _read_config_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ValueError(f"Config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse config file {path}: {e}", exc_info=True)
        raise ValueError(f"Failed to parse config file {path}: {e}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from defaults, the optional YAML file and the environment."""
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    config_path = env.get(CONFIG_PATH_ENV_VAR)
    if config_path:
        logger.debug(f"Loading configuration from {config_path}")
        values.update(_read_config_file(Path(config_path).expanduser()))

    if "registries" in values and isinstance(values["registries"], dict):
        # Files only need to list the presets they change.
        values["registries"] = {**REGISTRY_URLS, **values["registries"]}

    registry = env.get(REGISTRY_ENV_VAR)
    if registry:
        values["default_registry"] = coerce_registry(registry)

    timeout = env.get(TIMEOUT_ENV_VAR)
    if timeout:
        values["timeout_seconds"] = timeout

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}")
