"""
Configuration Service - YAML config with environment variable overrides
"""
import os
import copy
import yaml
from typing import Any, Dict, Optional
from pathlib import Path


PACKAGED_CONFIG = Path(__file__).resolve().parent.parent / "config" / "default.yaml"

TRUTHY = ('true', '1', 'yes')


def _flag(raw: str) -> bool:
    return raw.lower() in TRUTHY


# Environment variable -> (config key, converter)
ENV_OVERRIDES = {
    'USE_REFERENCE_TIMEZONE': ('timezone.use_reference', _flag),
    'REFERENCE_TIMEZONE': ('timezone.reference', str),
    'OMEGA_SHIFT_ENABLED': ('omega.enabled', _flag),
    'VINTAGE_OMEGA_SHIFT': ('omega.vintage', _flag),
    'OMEGA_CHECK_URL': ('omega.check_url', str),
    'RUSTPROOF_BEE_SHED': ('banners.bee_shed', _flag),
    'BANNER_DIR': ('banners.directory', str),
    'DISPLAY_WIDTH': ('display.width', int),
    'DISPLAY_HEIGHT': ('display.height', int),
    'DISPLAY_FULLSCREEN': ('display.fullscreen', _flag),
    'LOG_LEVEL': ('logging.level', str.upper),
}


class ConfigService:
    """
    Centralized configuration management with environment overrides.

    Priority order:
    1. Environment variables (highest)
    2. YAML config file
    3. Default values (lowest)
    """

    _instance: Optional['ConfigService'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls):
        """Singleton pattern for global config access"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize only once"""
        if not self._config:
            self.reload()

    def reload(self) -> None:
        """Load config from file and environment"""
        self._config = self._load_yaml_config()
        self._apply_env_overrides()

    def _load_yaml_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file, layered over the defaults"""
        config_paths = [
            Path("/data/config.yaml"),  # Production path
            Path("config/default.yaml"),  # Development path
            PACKAGED_CONFIG,
        ]

        for config_path in config_paths:
            if config_path.exists():
                try:
                    with open(config_path, 'r') as f:
                        loaded = yaml.safe_load(f) or {}
                    return _merge(self._get_defaults(), loaded)
                except (OSError, yaml.YAMLError) as e:
                    print(f"Warning: Failed to load {config_path}: {e}")

        # Return defaults if no config file found
        return self._get_defaults()

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides"""
        for env_name, (key, convert) in ENV_OVERRIDES.items():
            if raw := os.environ.get(env_name):
                try:
                    self.set(key, convert(raw))
                except ValueError as e:
                    print(f"Warning: Ignoring {env_name}={raw!r}: {e}")

    def _get_defaults(self) -> Dict[str, Any]:
        """Return default configuration"""
        return {
            'app': {
                'version': '1.0.0',
            },
            'timezone': {
                'use_reference': True,
                'reference': 'America/Los_Angeles',
            },
            'omega': {
                'enabled': False,
                'vintage': False,
                'check_url': 'http://vst.ninja/Resources/isitomegashift.html',
                'interval_minutes': 10,
                'timeout_seconds': 10,
                'active_month': 11,
            },
            'banners': {
                'bee_shed': False,
                'directory': '',
            },
            'display': {
                'width': 0,
                'height': 0,
                'fullscreen': True,
            },
            'logging': {
                'level': 'INFO',
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get config value using dot notation
        Example: config.get('omega.enabled')
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_all(self) -> Dict[str, Any]:
        """Get entire configuration dict"""
        return copy.deepcopy(self._config)

    def set(self, key: str, value: Any) -> None:
        """
        Set config value using dot notation
        Example: config.set('omega.enabled', True)
        """
        keys = key.split('.')
        target = self._config

        for k in keys[:-1]:
            target = target.setdefault(k, {})

        target[keys[-1]] = value


def _merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overlay into base (overlay wins)"""
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


# Global instance
config = ConfigService()
