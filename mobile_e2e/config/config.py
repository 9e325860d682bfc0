import logging
import os
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

from dotenv import load_dotenv

from mobile_e2e.config.path_constants import PathConstants

logger = logging.getLogger(__name__)

Platform = Literal['android', 'ios']
SUPPORTED_PLATFORMS: Tuple[str, ...] = ('android', 'ios')

# --- Module defaults (layer 3) ---
PLATFORM = 'android'
DEFAULT_APPIUM_URL = 'http://127.0.0.1:4723'
IOS_BUNDLE_ID_PREFIX = 'com.saucelabs'
REPORTS_DIR = PathConstants.REPORTS_DIR
LOG_DIR = PathConstants.LOG_DIR
LOG_LEVEL = 'INFO'
APPIUM_SERVER_CHECK = True

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}
_FALSE_VALUES = {'0', 'false', 'no', 'off', ''}


def normalize_platform(value: Optional[str]) -> Platform:
    """Normalize a platform name ('Android', ' ios ') to 'android' or 'ios'."""
    platform = (value or PLATFORM).strip().lower()
    if platform not in SUPPORTED_PLATFORMS:
        raise ValueError(
            f"Unsupported platform: {value}. Must be one of: {', '.join(SUPPORTED_PLATFORMS)}"
        )
    return platform  # type: ignore[return-value]


class Config:
    """
    Central configuration with three-layer precedence:
    runtime overrides > environment (optionally seeded from .env) > module defaults

    Missing capability keys resolve to None so callers can leave them unset and
    let the driver apply its own default.
    """

    def __init__(self, env: Optional[Mapping[str, str]] = None, load_env_file: bool = True):
        if env is None:
            if load_env_file:
                dotenv_path = os.path.join(os.getcwd(), '.env')
                # Variables already present in the process win over .env values
                load_dotenv(dotenv_path, override=False)
            env = os.environ
        self._env: Mapping[str, str] = env
        self._overrides: Dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        # Layer 1: runtime overrides
        if key in self._overrides:
            return self._overrides[key]

        # Layer 2: environment variables
        env_value = self._env.get(key)
        if env_value is not None:
            return env_value

        # Layer 3: module defaults
        module = globals()
        if key in module and key.isupper():
            return module[key]
        return default

    def set(self, key: str, value: Any) -> None:
        """Override a value for the lifetime of this Config; None removes the override."""
        if value is None:
            self._overrides.pop(key, None)
        else:
            self._overrides[key] = value

    def get_str(self, key: str, default: Optional[str] = None) -> Optional[str]:
        value = self.get(key, default)
        if value is None:
            return None
        value = str(value).strip()
        return value or default

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid integer for {key}: {value!r}, using {default}")
            return default

    def get_float(self, key: str, default: float) -> float:
        value = self.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid number for {key}: {value!r}, using {default}")
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        logger.warning(f"Invalid boolean for {key}: {value!r}, using {default}")
        return default

    def get_list(self, key: str) -> List[str]:
        """Comma separated value as a list, blanks dropped."""
        value = self.get(key)
        if not value:
            return []
        if isinstance(value, (list, tuple)):
            return [str(item).strip() for item in value if str(item).strip()]
        return [item.strip() for item in str(value).split(',') if item.strip()]

    @property
    def platform(self) -> Platform:
        return normalize_platform(self.get('PLATFORM'))

    @property
    def reports_dir(self) -> str:
        return os.path.abspath(self.get_str('REPORTS_DIR', REPORTS_DIR))

    @property
    def log_dir(self) -> str:
        return os.path.abspath(self.get_str('LOG_DIR', LOG_DIR))

    @property
    def log_level(self) -> str:
        return self.get_str('LOG_LEVEL', LOG_LEVEL).upper()

    def app_id(self, platform: Platform) -> Optional[str]:
        """Primary identifier of the app under test for a platform."""
        if platform == 'android':
            return self.get_str('ANDROID_APP_PACKAGE')
        return self.get_str('IOS_BUNDLE_ID') or self.get_str('IOS_APP_PATH')

    def server_url(self, platform: Platform) -> str:
        key = 'ANDROID_APPIUM_SERVER_URL' if platform == 'android' else 'IOS_APPIUM_SERVER_URL'
        return self.get_str(key) or DEFAULT_APPIUM_URL
