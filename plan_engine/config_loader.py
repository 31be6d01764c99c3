#!/usr/bin/env python3
"""
Configuration loader for the plan engine.

Loads settings from config.yaml with environment variable overrides.
"""

import os
import re
import threading
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, Set

from plan_engine.constants import (
    DEFAULT_FTP_WATTS,
    PLAN_WEEKS_MAX,
    PLAN_WEEKS_MIN,
    WEEKLY_HOURS_MAX,
    WEEKLY_HOURS_MIN,
)


# Allowlist of environment variables that can be substituted
ALLOWED_ENV_VARS: Set[str] = {
    'PE_STORE_DIR',
    'PE_EXPORT_DIR',
    'PE_LOG_LEVEL',
    'PE_LOG_FORMAT',
}

# Project root (plan_engine/ -> repository root)
PROJECT_ROOT: Path = Path(__file__).parent.parent.resolve()


class Config:
    """Engine configuration manager."""

    _instance = None
    _config = None
    _lock = threading.Lock()  # Thread-safe singleton

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                # Double-check locking pattern
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._config is None:
            self._load_config()

    def _load_config(self, config_path: Optional[Path] = None):
        """Load configuration from config.yaml."""
        if config_path is None:
            possible_paths = [
                PROJECT_ROOT / 'config.yaml',
                Path.cwd() / 'config.yaml',
                Path.home() / '.plan_engine' / 'config.yaml',
            ]
            for path in possible_paths:
                if path.exists():
                    config_path = path
                    break

        if config_path is None or not Path(config_path).exists():
            # Use defaults if no config found
            self._config = self._get_defaults()
            return

        with open(config_path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        # Missing sections fall back to defaults
        merged = self._merge(self._get_defaults(), raw_config)
        self._config = self._process_env_vars(merged)

    def reload(self, config_path: Optional[Path] = None):
        """Re-read configuration, optionally from an explicit file."""
        with self._lock:
            self._load_config(config_path)

    def _merge(self, base: Dict, override: Dict) -> Dict:
        result = dict(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(result.get(key), dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def _process_env_vars(self, obj: Any) -> Any:
        """
        Recursively process environment variable substitutions.

        SECURITY: Only allowlisted environment variables can be substituted.
        """
        if isinstance(obj, str):
            # Pattern: ${VAR_NAME:-default_value} or ${VAR_NAME}
            pattern = r'\$\{([^}:]+)(?::-([^}]*))?\}'

            def replace(match):
                var_name = match.group(1)
                default = match.group(2) or ''

                if var_name not in ALLOWED_ENV_VARS:
                    return default

                return os.environ.get(var_name, default)

            return re.sub(pattern, replace, obj)

        elif isinstance(obj, dict):
            return {k: self._process_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [self._process_env_vars(item) for item in obj]

        return obj

    def _get_defaults(self) -> Dict:
        """Return default configuration."""
        return {
            'paths': {
                'store_dir': './data/store',
                'export_dir': './data/exports',
            },
            'validation': {
                'weekly_hours_min': WEEKLY_HOURS_MIN,
                'weekly_hours_max': WEEKLY_HOURS_MAX,
                'plan_weeks_min': PLAN_WEEKS_MIN,
                'plan_weeks_max': PLAN_WEEKS_MAX,
            },
            'defaults': {
                'ftp_watts': DEFAULT_FTP_WATTS,
            },
            'logging': {
                'level': 'INFO',
            },
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Example: config.get('validation.plan_weeks_max', 24)
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_path(self, key: str) -> Optional[Path]:
        """Get a path configuration, resolving relative paths against the project root."""
        raw_path = self.get(f'paths.{key}', '')

        if not raw_path:
            return None

        path = Path(os.path.expanduser(raw_path))
        if not path.is_absolute():
            path = PROJECT_ROOT / path

        return path.resolve()

    def get_store_dir(self) -> Optional[Path]:
        """Directory used by the file-backed plan store."""
        return self.get_path('store_dir')

    def get_export_dir(self) -> Optional[Path]:
        """Directory for exported plans, calendars and ZWO files."""
        return self.get_path('export_dir')

    @property
    def all(self) -> Dict:
        """Return the full configuration dictionary."""
        return self._config


_config: Optional[Config] = None
_config_lock = threading.Lock()


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = Config()
    return _config
