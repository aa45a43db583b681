"""Configuration: user and repository config files plus environment overrides"""

import configparser
import logging
import os
import platform
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

APP_NAME = "prversion"
SECTION = APP_NAME
REPO_CONFIG_NAME = f".{APP_NAME}.cfg"
ENV_PREFIX = "PRVERSION_"

logger = logging.getLogger(__name__)

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/prversion").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))


class ConfigError(ValueError):
    """Raised when a configuration value cannot be interpreted."""


def get_config_file() -> Path:
    return config_dir / f"{APP_NAME}.cfg"


class ConfigAccessor:
    """
    A dict-like accessor for configuration files.

    Missing files, sections and keys are not errors; lookups fall back to
    the given default.

    Usage:
        config = ConfigAccessor()
        value = config.get('prversion', 'trunk_branch', default='main')
    """

    def __init__(self, config_path: Optional[Path] = None):
        if config_path is None:
            self.config_path = get_config_file()
        else:
            self.config_path = Path(config_path)

        self.config = configparser.ConfigParser()
        if self.config_path.exists():
            self.config.read(self.config_path)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        try:
            return self.config[section][key]
        except (KeyError, configparser.NoSectionError, configparser.NoOptionError):
            return default

    def set(self, section: str, key: str, value: str) -> None:
        if not self.config.has_section(section):
            self.config.add_section(section)

        self.config[section][key] = value

    def save(self) -> None:
        """
        Save the current configuration to the config file.

        Fails gracefully if the file cannot be written (e.g., read-only filesystem).
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w") as configfile:
                self.config.write(configfile)
        except (OSError, IOError) as e:
            logger.warning(
                f"Could not save configuration to {self.config_path}: {e}. "
                "Configuration changes will not persist."
            )

    def section(self, section: str) -> Dict[str, str]:
        """Return all options of a section, or an empty dict."""
        if not self.config.has_section(section):
            return {}
        return dict(self.config[section])


@dataclass
class Settings:
    version_file: str = "version.yaml"
    trunk_branch: str = "main"
    remote: str = "origin"
    github_repository: Optional[str] = None
    github_api_url: str = "https://api.github.com"
    github_token: Optional[str] = None
    list_timeout: float = 10.0
    push: bool = True


_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _coerce(key: str, value: str, default: Any) -> Any:
    if isinstance(default, bool):
        lowered = value.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ConfigError(f"Invalid boolean for '{key}': {value!r}")
    if isinstance(default, float):
        try:
            number = float(value)
        except ValueError as e:
            raise ConfigError(f"Invalid number for '{key}': {value!r}") from e
        if number <= 0:
            raise ConfigError(f"'{key}' must be positive, got {value!r}")
        return number
    return value.strip() or default


def validate_value(key: str, value: str) -> Any:
    """
    Check a raw configuration value for a Settings key.

    Raises:
        ConfigError: If the key is unknown or the value has the wrong type
    """
    defaults = Settings()
    if key == "github_token" or not hasattr(defaults, key):
        raise ConfigError(f"Unknown configuration key: {key}")
    return _coerce(key, value, getattr(defaults, key))


def load_settings(
    repo_root: Optional[Path] = None,
    user_config: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build settings from defaults, the user config file, the repository config
    file and PRVERSION_* environment variables, later sources winning.

    The GitHub token is read from GITHUB_TOKEN.

    Raises:
        ConfigError: If a value has the wrong type
    """
    if environ is None:
        environ = os.environ

    settings = Settings()
    defaults = Settings()
    names = [f.name for f in fields(Settings) if f.name != "github_token"]

    layers = [ConfigAccessor(user_config).section(SECTION)]
    if repo_root is not None:
        repo_config = Path(repo_root) / REPO_CONFIG_NAME
        if repo_config.exists():
            logger.debug(f"Reading repository config {repo_config}")
            layers.append(ConfigAccessor(repo_config).section(SECTION))
    layers.append(
        {
            name: environ[f"{ENV_PREFIX}{name.upper()}"]
            for name in names
            if f"{ENV_PREFIX}{name.upper()}" in environ
        }
    )

    for layer in layers:
        for name in names:
            if name in layer:
                value = _coerce(name, layer[name], getattr(defaults, name))
                setattr(settings, name, value)

    settings.github_token = environ.get("GITHUB_TOKEN") or None
    return settings
