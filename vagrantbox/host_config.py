"""Centralized host-side configuration for vagrantbox."""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from vagrantbox.models.host_config import HostConfigModel
from vagrantbox.paths import HostPaths

logger = logging.getLogger(__name__)


class HostConfig:
    """Manages host-side configuration from ~/.config/vagrantbox/config.yml.

    Precedence for the image values is: CLI flag > environment
    (VAGRANTBOX_IMAGE, VAGRANTBOX_TAG) > config file > built-in default.
    CLI flags are applied by the caller; this class covers the rest.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = config_path or HostPaths.config_file()
        self._model = self._load()

    def _load(self) -> HostConfigModel:
        """Load configuration from file."""
        if not self.config_path.exists():
            return HostConfigModel()

        try:
            with open(self.config_path) as f:
                raw_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {self.config_path}: {e}")
            return HostConfigModel()

        if not isinstance(raw_config, dict):
            logger.warning(f"Ignoring {self.config_path}: top level must be a mapping")
            return HostConfigModel()

        try:
            return HostConfigModel.model_validate(raw_config)
        except ValidationError as e:
            logger.warning(f"Config validation errors: {e}")
            # Fall back to defaults for every invalid field
            return self._salvage(raw_config)

    def _salvage(self, raw_config: dict) -> HostConfigModel:
        """Keep the valid fields of each section; defaults replace the rest."""
        sections = {}
        for name, field in HostConfigModel.model_fields.items():
            raw_section = raw_config.get(name)
            if raw_section is None:
                continue
            if not isinstance(raw_section, dict):
                logger.warning(f"Config section '{name}' must be a mapping, using defaults")
                continue

            section_model = field.annotation
            valid = {}
            for key, value in raw_section.items():
                try:
                    section_model.model_validate({key: value})
                except ValidationError:
                    logger.warning(f"Invalid config value {name}.{key}={value!r}, using default")
                    continue
                valid[key] = value
            sections[name] = section_model.model_validate(valid)
        return HostConfigModel(**sections)

    @property
    def image_name(self) -> str:
        env = os.getenv("VAGRANTBOX_IMAGE")
        if env:
            return env
        return self._value("image", "name")

    @property
    def image_tag(self) -> str:
        env = os.getenv("VAGRANTBOX_TAG")
        if env:
            return env
        return self._value("image", "tag")

    @property
    def registry_url(self) -> str:
        return self._value("registry", "url")

    @property
    def registry_username(self) -> Optional[str]:
        """Registry username; DOCKER_USERNAME beats the config file."""
        return os.getenv("DOCKER_USERNAME") or self._value("registry", "username")

    @property
    def profile(self) -> Optional[Path]:
        value = self._value("shell", "profile")
        return Path(value).expanduser() if value else None

    @property
    def workdir_mount_expr(self) -> str:
        return self._value("shell", "workdir_mount_expr")

    @property
    def socket_dir(self) -> Optional[str]:
        return self._value("libvirt", "socket_dir")

    @property
    def probe_timeout(self) -> float:
        return float(self._value("timeouts", "probe"))

    @property
    def shell_timeout(self) -> float:
        return float(self._value("timeouts", "shell"))

    def _value(self, section: str, key: str) -> Any:
        return getattr(getattr(self._model, section), key)


# Singleton instance
_config: Optional[HostConfig] = None


def get_config() -> HostConfig:
    """Get the global host configuration."""
    global _config
    if _config is None:
        _config = HostConfig()
    return _config


def reset_config() -> None:
    """Drop the cached configuration (tests and config reloads)."""
    global _config
    _config = None
