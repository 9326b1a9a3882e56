"""
Configuration Service - YAML config with environment variable overrides
"""
import logging
import os
import yaml
from typing import Any, Dict, Optional
from pathlib import Path


PACKAGE_CONFIG = Path(__file__).resolve().parent.parent / 'config' / 'default.yaml'


def _env_flag(value: str) -> bool:
    return value.lower() in ('true', '1', 'yes')


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
        self._config = self._merge(self._get_defaults(), self._load_yaml_config())
        self._apply_env_overrides()

    def _config_paths(self):
        paths = []
        if env_path := os.environ.get('WATCHFACE_CONFIG'):
            paths.append(Path(env_path))
        paths.extend([
            Path("/etc/watchface/config.yaml"),  # Installed path
            Path("config/default.yaml"),  # Development path
            PACKAGE_CONFIG,  # Bundled defaults
        ])
        return paths

    def _load_yaml_config(self) -> Dict[str, Any]:
        """Load configuration from the first YAML file found"""
        for config_path in self._config_paths():
            if config_path.exists():
                try:
                    with open(config_path, 'r') as f:
                        return yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logging.getLogger(__name__).warning(f"Failed to load {config_path}: {e}")

        return {}

    def _merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively overlay `override` onto `base`"""
        merged = dict(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = self._merge(merged[key], value)
            else:
                merged[key] = value
        return merged

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides"""
        # Timezone
        if env_tz := os.environ.get('TIMEZONE'):
            self._config['timezone'] = env_tz

        # Display
        if env_width := os.environ.get('DISPLAY_WIDTH'):
            self.set('display.width', int(env_width))

        if env_height := os.environ.get('DISPLAY_HEIGHT'):
            self.set('display.height', int(env_height))

        if env_fullscreen := os.environ.get('DISPLAY_FULLSCREEN'):
            self.set('display.fullscreen', _env_flag(env_fullscreen))

        # Assets and face
        if env_assets := os.environ.get('ASSETS_DIR'):
            self.set('assets.directory', env_assets)

        if env_style := os.environ.get('HAND_STYLE'):
            self.set('face.hand_style', env_style)

        # Power
        if env_timeout := os.environ.get('AMBIENT_TIMEOUT_SECONDS'):
            self.set('power.ambient_timeout_seconds', int(env_timeout))

        # Logging
        if env_level := os.environ.get('LOG_LEVEL'):
            self.set('logging.level', env_level)

    def _get_defaults(self) -> Dict[str, Any]:
        """Return default configuration"""
        return {
            'app': {
                'name': 'watchface',
            },
            'timezone': '',
            'display': {
                'width': 454,
                'height': 454,
                'fullscreen': False,
            },
            'assets': {
                'directory': '',
                'background': 'background.png',
                'hour_hand': 'hour_hand.png',
                'minute_hand': 'minute_hand.png',
                'second_hand': 'second_hand.png',
                'hand_scale_mode': 'scaled_background',
            },
            'face': {
                'hand_style': 'bitmap',
                'overlay_font_size': 20,
                'overlay_color': '#ffffff',
            },
            'scheduler': {
                'interactive_update_ms': 1000,
            },
            'power': {
                'ambient_timeout_seconds': 30,
                'time_tick_seconds': 60,
            },
            'ambient': {
                'low_bit': True,
            },
            'tap': {
                'message': 'Analog watch face',
            },
            'timezone_watch': {
                'poll_seconds': 5,
            },
            'battery': {
                'path': '',
            },
            'logging': {
                'level': 'INFO',
                'file': '',
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get config value using dot notation
        Example: config.get('display.width')
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
        return self._config.copy()

    def set(self, key: str, value: Any) -> None:
        """
        Set config value using dot notation
        Example: config.set('face.hand_style', 'vector')
        """
        keys = key.split('.')
        target = self._config

        for k in keys[:-1]:
            target = target.setdefault(k, {})

        target[keys[-1]] = value


# Global instance
config = ConfigService()
