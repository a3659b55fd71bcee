"""
codeindex User Configuration

Hierarchical config system with global defaults + local overrides:
- Global: ~/.codeindex/config.json (cross-project settings)
- Local: .codeindex/config.json (project-specific overrides)

Config structure:
{
  "index": {
    "respect_gitignore": false,   // Apply .gitignore rules while crawling
    "max_bytes": null             // Skip files larger than this
  },
  "search": {
    "default_limit": 1000         // LIMIT applied when --limit is not given
  },
  "export": {
    "format": "markdown"
  }
}
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from codeindex.logging_config import logger
from codeindex.paths import get_paths


DEFAULT_CONFIG = {
    "index": {
        "respect_gitignore": False,
        "max_bytes": None,
    },
    "search": {
        "default_limit": 1000,
    },
    "export": {
        "format": "markdown",
    },
}


class UserConfig:
    """
    Manages hierarchical user configuration.

    Load order (with override):
    1. Default config (hardcoded)
    2. Global config (~/.codeindex/config.json)
    3. Local config (.codeindex/config.json)
    """

    def __init__(self, project_root: Optional[Path] = None, global_config_path: Optional[Path] = None):
        paths = get_paths(project_root)
        self.project_root = paths.project_root
        self.global_config_path = global_config_path or paths.global_config
        self.local_config_path = paths.local_config

        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration with hierarchical override."""
        config = copy.deepcopy(DEFAULT_CONFIG)

        for label, path in (("global", self.global_config_path), ("local", self.local_config_path)):
            if not path.exists():
                continue
            try:
                with open(path, 'r') as f:
                    config = self._deep_merge(config, json.load(f))
                logger.debug(f"Loaded {label} config from {path}")
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to load {label} config: {e}")

        return config

    def _deep_merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dictionaries, with override taking precedence."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a config value by dot-separated key.

        Examples:
            config.get("search.default_limit")  # 1000
            config.get("index.respect_gitignore")  # False
        """
        value = self._config
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set_local(self, key: str, value: Any) -> bool:
        """
        Set a local config value and save it to .codeindex/config.json.

        Returns:
            True if successful, False otherwise
        """
        config_path = self.local_config_path

        if config_path.exists():
            try:
                with open(config_path, 'r') as f:
                    config = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to load config from {config_path}: {e}")
                return False
        else:
            config = {}

        keys = key.split(".")
        current = config
        for k in keys[:-1]:
            current = current.setdefault(k, {})
        current[keys[-1]] = value

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w') as f:
                json.dump(config, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save config to {config_path}: {e}")
            return False

        self._config = self._load_config()
        logger.info(f"Saved local config: {key}={value}")
        return True

    def get_all(self) -> Dict[str, Any]:
        """Get the entire merged configuration."""
        return copy.deepcopy(self._config)


# Global singleton
_config: Optional[UserConfig] = None


def get_user_config(project_root: Optional[Path] = None) -> UserConfig:
    """
    Get the user configuration singleton.

    A project_root always builds a fresh instance.
    """
    global _config
    if project_root is not None:
        return UserConfig(project_root)
    if _config is None:
        _config = UserConfig()
    return _config


def reset_user_config() -> None:
    """Reset the global config singleton (for testing)."""
    global _config
    _config = None
