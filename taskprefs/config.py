"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables (TASKPREFS_STORE_BACKEND, TASKPREFS_STORE_PATH)
  2. Project config (.taskprefs/config.yaml)
  3. User config (~/.taskprefs/config.yaml)
  4. Defaults

Only the store section exists today: which backend holds the user's
preferences and, for the file backend, where the document lives.
"""

import logging
import os
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


STORE_BACKENDS = ("file", "memory")
DEFAULT_BACKEND = "file"
DEFAULT_STORE_FILE = "user_preferences.json"


@dataclass
class StoreConfig:
    """Preference store configuration."""
    backend: str = DEFAULT_BACKEND  # "file" | "memory"
    path: Optional[str] = None  # None = ~/.taskprefs/user_preferences.json

    @property
    def effective_path(self) -> Path:
        """Get store path, falling back to the per-user default."""
        if self.path:
            return Path(self.path).expanduser()
        return ConfigManager.USER_CONFIG_DIR / DEFAULT_STORE_FILE

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.backend not in STORE_BACKENDS:
            return f"Unknown store backend '{self.backend}'. Valid: {', '.join(STORE_BACKENDS)}"
        if self.backend == "memory" and self.path:
            return "store.path only applies to the file backend"
        return None


@dataclass
class Config:
    """Application configuration."""
    store: StoreConfig = field(default_factory=StoreConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "store": {
                "backend": self.store.backend,
                "path": self.store.path
            }
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        store_data = data.get("store") or {}

        return cls(
            store=StoreConfig(
                backend=store_data.get("backend", DEFAULT_BACKEND),
                path=store_data.get("path")
            )
        )


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment
      2. Project config (.taskprefs/config.yaml)
      3. User config (~/.taskprefs/config.yaml)
      4. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".taskprefs"
    USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"
    PROJECT_CONFIG_DIR = ".taskprefs"
    PROJECT_CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.USER_CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        # Start with defaults
        config_data: Dict[str, Any] = {}

        # Layer 1: User config
        config_data = self._merge(config_data, self._read_yaml(self.user_config_path))

        # Layer 2: Project config (higher priority)
        config_data = self._merge(config_data, self._read_yaml(self.project_config_path))

        # Layer 3: Environment overrides
        if os.environ.get("TASKPREFS_STORE_BACKEND"):
            config_data.setdefault("store", {})["backend"] = os.environ["TASKPREFS_STORE_BACKEND"]
        if os.environ.get("TASKPREFS_STORE_PATH"):
            config_data.setdefault("store", {})["path"] = os.environ["TASKPREFS_STORE_PATH"]

        self._config = Config.from_dict(config_data)
        return self._config

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        """Read one config file; a missing or malformed file contributes nothing."""
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (yaml.YAMLError, OSError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: expected a mapping", path)
            return {}
        return data

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self.project_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.project_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self.user_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.user_config_path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)

        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "store.backend")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'store.backend')"

        section, setting = parts

        if section == "store":
            if setting == "backend":
                config.store.backend = value
            elif setting == "path":
                config.store.path = value or None
            else:
                return f"Unknown store setting: {setting}. Valid: backend, path"
            error = config.store.validate()
            if error:
                # Drop the rejected value so later loads re-read the files
                self._config = None
                return error
        else:
            return f"Unknown section: {section}. Valid: store"

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)

        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value."""
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return None

        section, setting = parts

        if section == "store":
            if setting == "backend":
                return config.store.backend
            elif setting == "path":
                return str(config.store.effective_path)

        return None

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()

        lines = [
            "Configuration:",
            "",
            "Store:",
            f"  Backend: {config.store.backend}",
        ]
        if config.store.backend == "file":
            lines.append(f"  Path: {config.store.effective_path}")

        lines.extend([
            "",
            "Config files:",
            f"  User: {self.user_config_path}",
            f"  Project: {self.project_config_path}",
        ])

        return "\n".join(lines)


# Convenience function
def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
