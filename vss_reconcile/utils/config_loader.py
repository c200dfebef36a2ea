"""Loading and checking of reconciliation settings.

Settings come from a YAML file (``config/<APP_ENV>.yaml``, falling back to
``config/default.yaml``). String values may reference environment
variables as ``${NAME}``; repository passwords are usually supplied that
way by the build server.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml
from pydantic import ValidationError

from vss_reconcile.models.config import AppConfig, RepositoryConfig

log = structlog.stdlib.get_logger()

CONFIG_DIR = Path(__file__).parent.parent.parent / "config"

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


class ConfigurationError(Exception):
    """Raised when settings are missing, malformed or inconsistent."""

    pass


class UnsupportedPlatformError(ConfigurationError):
    """Raised when synchronization is attempted on an unsupported host platform."""

    pass


class ConfigLoader:
    """Builds an AppConfig from a YAML settings file."""

    def __init__(self, config_dir: Path = CONFIG_DIR) -> None:
        self.config_dir = Path(config_dir)

    def load_config(self, config_path: Optional[str] = None) -> AppConfig:
        """Read, expand and validate a settings file.

        Args:
            config_path: Settings file; the environment's file under
                config_dir when None

        Returns:
            AppConfig: Validated settings

        Raises:
            ConfigurationError: If the file is missing, unreadable, references
                an unset variable or fails validation
        """
        path = config_path or self.find_settings_file()
        log.info("loading_configuration", config_path=path)

        raw = self._expand(self._read_settings(path))

        try:
            settings = AppConfig(**raw)
        except ValidationError as e:
            log.error("configuration_validation_failed", config_path=path, error=str(e))
            raise ConfigurationError(f"Configuration validation failed: {e}") from e

        log.info(
            "configuration_loaded_successfully",
            location=settings.repository.location,
            roots=settings.repository.roots,
        )
        return settings

    def find_settings_file(self) -> str:
        """Locate the settings file for APP_ENV, falling back to default.yaml."""
        environment = os.getenv("APP_ENV", "default")
        for candidate in (f"{environment}.yaml", "default.yaml"):
            path = self.config_dir / candidate
            if path.exists():
                return str(path)

        raise ConfigurationError(
            f"Configuration file not found in {self.config_dir} "
            f"(APP_ENV={environment!r}, no default.yaml either)"
        )

    def _read_settings(self, path: str) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML file {path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read configuration file {path}: {e}") from e

        if data is None:
            raise ConfigurationError(f"Configuration file is empty: {path}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {path}")
        return data

    def _expand(self, node: Any) -> Any:
        """Replace ${NAME} placeholders in every string of a parsed YAML tree."""
        if isinstance(node, dict):
            return {key: self._expand(value) for key, value in node.items()}
        if isinstance(node, list):
            return [self._expand(item) for item in node]
        if isinstance(node, str):
            return _PLACEHOLDER.sub(_environment_value, node)
        return node

    def validate_config(self, config: AppConfig) -> list[str]:
        """Report settings that are legal but probably not what was meant.

        Hard errors (such as a missing repository database) are raised by
        validate_repository instead.

        Returns:
            Warning messages, empty when nothing looks suspicious
        """
        roots = config.repository.roots
        warnings = [
            f"root '{root}' does not start with '$/'"
            for root in roots
            if not root.startswith("$/")
        ]

        if len(set(roots)) != len(roots):
            warnings.append("roots contains duplicate paths")

        if config.sync.incremental and config.sync.max_entries < 10:
            warnings.append(
                f"max_entries ({config.sync.max_entries}) is very low; incremental "
                f"sync will fall back to a full refresh for most cycles"
            )

        if warnings:
            log.warning("configuration_validation_warnings", warnings=warnings)
        return warnings


def _environment_value(match: re.Match) -> str:
    name = match.group(1)
    value = os.getenv(name)
    if value is None:
        log.error("environment_variable_missing", name=name)
        raise ConfigurationError(
            f"Required environment variable not set: {name}. "
            f"Export {name} in the build environment."
        )
    return value


def validate_repository(config: RepositoryConfig) -> None:
    """Check that the repository location points at a database ini file.

    Raises:
        ConfigurationError: If the location is missing or is a directory
    """
    location = Path(config.location)
    if not location.exists():
        log.error("repository_location_missing", location=config.location)
        raise ConfigurationError(f"{config.location} doesn't exist. Configuration error?")
    if location.is_dir():
        log.error("repository_location_is_directory", location=config.location)
        raise ConfigurationError(
            f"{config.location} is a directory. Please specify the location of srcsafe.ini"
        )
