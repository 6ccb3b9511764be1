"""Configuration loader with priority-based resolution.

Sources are merged in this order, later ones winning:
1. Default values
2. YAML configuration file
3. Environment variables (ETA_ prefix)
4. CLI arguments
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .schema import AppConfig

ENV_PREFIX = "ETA_"
SECTIONS = ("paths", "screening", "scorecard", "logging")


class ConfigurationError(Exception):
    """Raised when configuration loading fails."""

    pass


class ConfigLoader:
    """Load an AppConfig from YAML, environment and CLI overrides."""

    def __init__(self, config_path: str | None = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML configuration file.
                        Defaults to 'config.yaml' in current directory.
        """
        self.config_path = config_path or "config.yaml"
        self._yaml_data: dict[str, Any] = {}
        self._cli_overrides: dict[str, Any] = {}

    def load_config(
        self,
        cli_overrides: dict[str, Any] | None = None,
        validate: bool = True,
    ) -> AppConfig:
        """Load configuration with full precedence resolution.

        Args:
            cli_overrides: Nested dict of CLI overrides, e.g.
                           ``{"screening": {"sba_rate_pct": 9.5}}``
            validate: Create the configured directories when True. Tests pass
                      False to avoid touching the filesystem.

        Returns:
            AppConfig: Validated configuration object

        Raises:
            ConfigurationError: If configuration loading or validation fails
        """
        try:
            self._cli_overrides = cli_overrides or {}
            self._load_yaml_config()
            config = AppConfig(**self._merge_all_sources())

            if validate:
                config.ensure_directories()

            return config

        except ValidationError as e:
            self._raise_helpful_error(e)
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def _load_yaml_config(self) -> None:
        """Load YAML configuration file if it exists."""
        config_file = Path(self.config_path)

        if not config_file.exists():
            # YAML file is optional
            self._yaml_data = {}
            return

        try:
            with open(config_file, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Failed to read {config_file}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid YAML in {config_file}: top level must be a mapping")

        unknown = set(data) - set(SECTIONS)
        if unknown:
            raise ConfigurationError(
                f"Unknown section(s) in {config_file}: {sorted(unknown)}. Valid sections: {list(SECTIONS)}"
            )
        self._yaml_data = data

    def _merge_all_sources(self) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        self._deep_merge(merged, self._yaml_data)
        self._deep_merge(merged, self._get_env_overrides())
        self._deep_merge(merged, self._cli_overrides)
        return merged

    def _get_env_overrides(self) -> dict[str, Any]:
        """Turn ETA_SECTION__FIELD variables into a nested dict.

        Returns:
            Dict with nested structure for environment overrides
        """
        nested: dict[str, Any] = {}

        for env_key, env_value in os.environ.items():
            if not env_key.upper().startswith(ENV_PREFIX):
                continue

            parts = [part.lower() for part in env_key[len(ENV_PREFIX) :].split("__")]
            if parts[0] not in SECTIONS or len(parts) < 2:
                continue

            current = nested
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = self._parse_env_value(env_value)

        return nested

    def _parse_env_value(self, value: str) -> Any:
        """Parse environment variable value to appropriate Python type.

        Args:
            value: String value from environment variable

        Returns:
            Parsed value (str, int, float or bool)
        """
        if not value:
            return value

        if value.lower() in ("true", "yes", "on"):
            return True
        if value.lower() in ("false", "no", "off"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        return value

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> None:
        """Deep merge override dict into base dict (base is modified in place)."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            elif isinstance(value, dict):
                base[key] = {}
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _raise_helpful_error(self, validation_error: ValidationError) -> None:
        """Convert Pydantic validation error to helpful configuration error.

        Raises:
            ConfigurationError: With helpful error message
        """
        error_messages = []

        for error in validation_error.errors():
            loc = " -> ".join(str(x) for x in error["loc"])
            error_messages.append(f"  {loc}: {error['msg']}")

        helpful_msg = (
            "Configuration validation failed:\n"
            + "\n".join(error_messages)
            + "\n\nPlease check your configuration in:\n"
            f"  1. {self.config_path} (YAML file)\n"
            f"  2. Environment variables ({ENV_PREFIX}* prefix)\n"
            "  3. CLI arguments\n"
        )

        raise ConfigurationError(helpful_msg) from validation_error

    def get_config_sources_info(self) -> dict[str, Any]:
        """Describe where configuration came from, for the config command."""
        config_file = Path(self.config_path)
        env_vars = [k for k in os.environ if k.upper().startswith(ENV_PREFIX)]

        return {
            "yaml_file": {
                "path": str(config_file.absolute()),
                "exists": config_file.exists(),
            },
            "environment_variables": {
                "count": len(env_vars),
                "variables": sorted(env_vars),
            },
            "cli_overrides": {
                "count": len(self._cli_overrides),
                "sections": list(self._cli_overrides.keys()),
            },
        }


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
    validate: bool = True,
) -> AppConfig:
    """Convenience function to load configuration.

    Raises:
        ConfigurationError: If configuration loading fails
    """
    loader = ConfigLoader(config_path)
    return loader.load_config(cli_overrides, validate)


def load_config_for_testing(
    yaml_content: str | None = None,
    env_vars: dict[str, str] | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Load configuration from inline YAML and temporary environment variables.

    Args:
        yaml_content: YAML content as string
        env_vars: Environment variables to set temporarily
        cli_overrides: CLI override values

    Returns:
        AppConfig: Loaded configuration (directories are not created)
    """
    import tempfile

    config_path = None
    if yaml_content:
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False, encoding="utf-8") as f:
            f.write(yaml_content)
            config_path = f.name

    old_env = {}
    if env_vars:
        for key, value in env_vars.items():
            old_env[key] = os.environ.get(key)
            os.environ[key] = value

    try:
        # Without a YAML file, point at a path that cannot exist
        loader = ConfigLoader(config_path or os.path.join(tempfile.gettempdir(), "eta-no-config.yaml"))
        return loader.load_config(cli_overrides, validate=False)
    finally:
        for key, old_value in old_env.items():
            if old_value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = old_value

        if config_path:
            os.unlink(config_path)
