"""Configuration management module.

This module handles persistent configuration storage using TOML format.
Stores the reconciliation scope (subscription, resource group, location,
cluster) and the desired Bastion hosts.

Security:
- Config file permissions: 0600 (owner read/write only)
- Path validation
- Input sanitization
"""

import logging
import os
import tempfile
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomli  # type: ignore[import]
except ImportError:
    # Fallback for Python versions that ship tomllib
    try:
        import tomllib as tomli  # type: ignore[import]
    except ImportError as e:
        raise ImportError("toml library not available. Install with: pip install tomli") from e

try:
    import tomlkit
except ImportError as e:
    raise ImportError("tomlkit library not available. Install with: pip install tomlkit") from e

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "westus2"
DEFAULT_BACKEND = "cli"
DEFAULT_COMMAND_TIMEOUT = 60
DEFAULT_PROVISIONING_TIMEOUT = 900


class ConfigError(Exception):
    """Raised when configuration operations fail."""

    pass


@dataclass
class BastionEntry:
    """One [[bastions]] table. Missing names are defaulted by the scope."""

    name: str
    vnet_name: str | None = None
    subnet_name: str | None = None
    public_ip_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BastionEntry":
        if not isinstance(data, dict) or not data.get("name"):
            raise ConfigError(f"Bastion entry requires a name: {data}")
        return cls(
            name=data["name"],
            vnet_name=data.get("vnet_name"),
            subnet_name=data.get("subnet_name"),
            public_ip_name=data.get("public_ip_name"),
        )


@dataclass
class ReconcileConfig:
    """azbastion configuration data."""

    subscription_id: str | None = None
    resource_group: str | None = None
    location: str = DEFAULT_LOCATION
    cluster_name: str | None = None
    backend: str = DEFAULT_BACKEND
    command_timeout: int = DEFAULT_COMMAND_TIMEOUT
    provisioning_timeout: int = DEFAULT_PROVISIONING_TIMEOUT
    bastions: list[BastionEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        data = asdict(self)
        data["bastions"] = [
            {k: v for k, v in entry.items() if v is not None} for entry in data["bastions"]
        ]
        # Filter out None values as TOML doesn't support them
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReconcileConfig":
        """Create from dictionary."""
        try:
            command_timeout = int(data.get("command_timeout", DEFAULT_COMMAND_TIMEOUT))
            provisioning_timeout = int(
                data.get("provisioning_timeout", DEFAULT_PROVISIONING_TIMEOUT)
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid timeout value: {e}") from e

        return cls(
            subscription_id=data.get("subscription_id"),
            resource_group=data.get("resource_group"),
            location=data.get("location", DEFAULT_LOCATION),
            cluster_name=data.get("cluster_name"),
            backend=data.get("backend", DEFAULT_BACKEND),
            command_timeout=command_timeout,
            provisioning_timeout=provisioning_timeout,
            bastions=[BastionEntry.from_dict(entry) for entry in data.get("bastions", [])],
        )


class ConfigManager:
    """Manage azbastion configuration file.

    Configuration is stored at ~/.azbastion/config.toml with secure permissions.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".azbastion"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

    @classmethod
    def _validate_config_path(cls, path: Path) -> Path:
        """Validate configuration file path for security.

        Ensures the path is within allowed directories to prevent path traversal attacks.

        Args:
            path: Path to validate

        Returns:
            Validated, resolved path

        Raises:
            ConfigError: If path is outside allowed directories
        """
        resolved_path = path.resolve()

        allowed_dirs = [
            cls.DEFAULT_CONFIG_DIR.resolve(),
            Path.cwd().resolve(),
            Path(tempfile.gettempdir()).resolve(),  # Allow pytest tmp_path
        ]

        for allowed_dir in allowed_dirs:
            try:
                resolved_path.relative_to(allowed_dir)
                return resolved_path
            except ValueError:
                continue

        raise ConfigError(
            f"Config path outside allowed directories: {resolved_path}\n"
            f"Allowed directories:\n"
            f"  - {cls.DEFAULT_CONFIG_DIR}\n"
            f"  - {Path.cwd()}\n"
            "This restriction prevents path traversal attacks."
        )

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            Path to config file

        Raises:
            ConfigError: If path is invalid or outside allowed directories
        """
        if custom_path:
            path = cls._validate_config_path(Path(custom_path).expanduser())
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def ensure_config_dir(cls) -> Path:
        """Ensure config directory exists with secure permissions.

        Raises:
            ConfigError: If directory creation fails
        """
        try:
            cls.DEFAULT_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
            os.chmod(cls.DEFAULT_CONFIG_DIR, 0o700)
            logger.debug(f"Config directory ready: {cls.DEFAULT_CONFIG_DIR}")
            return cls.DEFAULT_CONFIG_DIR
        except Exception as e:
            raise ConfigError(f"Failed to create config directory: {e}") from e

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> ReconcileConfig:
        """Load configuration from file.

        Args:
            custom_path: Custom config file path (optional)

        Returns:
            ReconcileConfig object (defaults if the file does not exist)

        Raises:
            ConfigError: If loading fails
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            return ReconcileConfig()

        try:
            mode = config_path.stat().st_mode & 0o777
            if mode & 0o077:  # Check if group/other have any permissions
                logger.warning(
                    f"Config file has insecure permissions: {oct(mode)}. Fixing to 0600..."
                )
                os.chmod(config_path, 0o600)

            with open(config_path, "rb") as f:
                data = tomli.load(f)  # type: ignore[attr-defined]

            logger.debug(f"Loaded config from: {config_path}")
            return ReconcileConfig.from_dict(data)

        except ConfigError:
            raise
        except Exception as e:
            raise ConfigError(f"Failed to load config: {e}") from e

    @classmethod
    def save_config(cls, config: ReconcileConfig, custom_path: str | None = None) -> None:
        """Save configuration to file.

        Existing comments and formatting are preserved. The file is written to
        a temporary file and atomically renamed.

        Args:
            config: Configuration to save
            custom_path: Custom config file path (optional)

        Raises:
            ConfigError: If saving fails or path is outside allowed directories
        """
        temp_path: Path | None = None
        try:
            if custom_path:
                config_path = cls._validate_config_path(Path(custom_path).expanduser())
                config_path.parent.mkdir(parents=True, exist_ok=True)
            else:
                cls.ensure_config_dir()
                config_path = cls.DEFAULT_CONFIG_FILE

            temp_path = config_path.with_suffix(".tmp")

            if config_path.exists():
                with open(config_path) as f:
                    doc = tomlkit.load(f)
            else:
                doc = tomlkit.document()

            for key, value in config.to_dict().items():
                if key == "bastions":
                    if key in doc:
                        del doc[key]
                    if value:
                        tables = tomlkit.aot()
                        for entry in value:
                            tables.append(tomlkit.item(entry))
                        doc[key] = tables
                else:
                    doc[key] = value

            with open(temp_path, "w") as f:
                tomlkit.dump(doc, f)

            os.chmod(temp_path, 0o600)
            temp_path.replace(config_path)

            logger.debug(f"Saved config to: {config_path}")

        except Exception as e:
            if temp_path and temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to save config: {e}") from e

    @classmethod
    def resolve(cls, custom_path: str | None = None, **overrides: Any) -> ReconcileConfig:
        """Load configuration and apply CLI overrides.

        Args:
            custom_path: Custom config file path (optional)
            **overrides: Values from CLI options; None means "not given"

        Returns:
            ReconcileConfig with overrides applied
        """
        config = cls.load_config(custom_path)

        for key, value in overrides.items():
            if value is None:
                continue
            if hasattr(config, key):
                setattr(config, key, value)
            else:
                logger.warning(f"Unknown config key: {key}")

        return config


__all__ = [
    "BastionEntry",
    "ConfigError",
    "ConfigManager",
    "ReconcileConfig",
]
