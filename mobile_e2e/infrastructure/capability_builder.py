"""
Capability builder utilities for W3C-compliant Appium capabilities.

Builds and validates Appium capabilities for the Android and iOS builds of the
app under test from environment-backed configuration.
"""

import logging
from typing import Any, Dict, Optional

from mobile_e2e.config.config import Config, Platform, normalize_platform
from mobile_e2e.config.numeric_constants import NEW_COMMAND_TIMEOUT

logger = logging.getLogger(__name__)

# Type alias for capabilities dictionary
AppiumCapabilities = Dict[str, Any]

AUTOMATION_NAMES: Dict[str, str] = {
    'Android': 'UiAutomator2',
    'iOS': 'XCUITest',
}


def build_w3c_capabilities(
    platform_name: str,
    base_caps: Dict[str, Any],
    additional_caps: Optional[Dict[str, Any]] = None
) -> AppiumCapabilities:
    """
    Build W3C compliant capabilities shared by both platforms.

    Args:
        platform_name: 'Android' or 'iOS'
        base_caps: Platform specific capabilities
        additional_caps: Additional capabilities to merge

    Returns:
        W3C-compliant capabilities dictionary without unset values
    """
    caps: AppiumCapabilities = {
        'platformName': platform_name,
        'appium:automationName': AUTOMATION_NAMES[platform_name],
        'appium:newCommandTimeout': NEW_COMMAND_TIMEOUT,
        # Fresh session state for every run
        'appium:noReset': False,
    }
    caps = merge_capabilities(caps, base_caps)
    caps = merge_capabilities(caps, additional_caps or {})
    caps = sanitize_capabilities(caps)

    validate_capabilities(caps)

    logger.debug(f'Built W3C capabilities for {platform_name}: {list(caps.keys())}')
    return caps


def build_android_capabilities(
    config: Config,
    additional_caps: Optional[Dict[str, Any]] = None
) -> AppiumCapabilities:
    """
    Build Android-specific capabilities.

    Args:
        config: Suite configuration
        additional_caps: Additional capabilities to merge

    Returns:
        Android capabilities dictionary
    """
    android_caps: Dict[str, Any] = {
        'appium:platformVersion': config.get_str('ANDROID_PLATFORM_VERSION'),
        'appium:deviceName': config.get_str('ANDROID_DEVICE_NAME'),
        'appium:appPackage': config.get_str('ANDROID_APP_PACKAGE'),
        'appium:appActivity': config.get_str('ANDROID_APP_ACTIVITY'),
    }
    return build_w3c_capabilities('Android', android_caps, additional_caps)


def build_ios_capabilities(
    config: Config,
    additional_caps: Optional[Dict[str, Any]] = None
) -> AppiumCapabilities:
    """
    Build iOS-specific capabilities.

    Args:
        config: Suite configuration
        additional_caps: Additional capabilities to merge

    Returns:
        iOS capabilities dictionary
    """
    ios_caps: Dict[str, Any] = {
        'appium:platformVersion': config.get_str('IOS_PLATFORM_VERSION'),
        'appium:deviceName': config.get_str('IOS_DEVICE_NAME'),
        'appium:app': config.get_str('IOS_APP_PATH'),
        'appium:autoAcceptAlerts': True,
    }
    return build_w3c_capabilities('iOS', ios_caps, additional_caps)


def build_capabilities(
    platform: str,
    config: Config,
    additional_caps: Optional[Dict[str, Any]] = None
) -> AppiumCapabilities:
    """Dispatch to the platform builder."""
    normalized: Platform = normalize_platform(platform)
    if normalized == 'android':
        return build_android_capabilities(config, additional_caps)
    return build_ios_capabilities(config, additional_caps)


def validate_capabilities(capabilities: AppiumCapabilities) -> None:
    """
    Validate required capabilities.

    Args:
        capabilities: Capabilities to validate

    Raises:
        ValueError: If required capabilities are missing or invalid
    """
    required = ['platformName', 'appium:automationName']
    missing = [cap for cap in required if capabilities.get(cap) is None]

    if missing:
        raise ValueError(f'Missing required capabilities: {", ".join(missing)}')

    platform_name = capabilities['platformName']
    if platform_name not in AUTOMATION_NAMES:
        raise ValueError(
            f'Invalid platformName: {platform_name}. '
            f'Must be one of: {", ".join(AUTOMATION_NAMES)}'
        )

    automation_name = capabilities['appium:automationName']
    expected = AUTOMATION_NAMES[platform_name]
    if automation_name != expected:
        logger.warning(
            f"Recommended automationName for {platform_name} is '{expected}', got '{automation_name}'"
        )

    logger.debug('Capabilities validation passed')


def merge_capabilities(
    base_caps: AppiumCapabilities,
    additional_caps: Dict[str, Any]
) -> AppiumCapabilities:
    """
    Merge capabilities; later values win unless they are None.

    Args:
        base_caps: Base capabilities
        additional_caps: Additional capabilities to merge

    Returns:
        Merged capabilities
    """
    merged = {**base_caps}

    for key, value in additional_caps.items():
        if value is not None or key not in merged:
            merged[key] = value

    return merged


def sanitize_capabilities(capabilities: AppiumCapabilities) -> AppiumCapabilities:
    """
    Drop unset values so the driver applies its own defaults, and coerce
    numeric timeouts given as strings.

    Args:
        capabilities: Capabilities to sanitize

    Returns:
        Sanitized capabilities
    """
    sanitized = {k: v for k, v in capabilities.items() if v is not None}

    for key, value in list(sanitized.items()):
        if 'Timeout' in key and isinstance(value, str):
            try:
                sanitized[key] = int(value)
            except ValueError:
                logger.warning(f'Invalid timeout value for {key}: {value}, removing capability')
                del sanitized[key]

    return sanitized


def log_capabilities(capabilities: AppiumCapabilities, title: str = 'Capabilities') -> None:
    """
    Log capabilities in a readable format.

    Args:
        capabilities: Capabilities to log
        title: Log title
    """
    readable: Dict[str, Any] = {}

    for key, value in capabilities.items():
        if key.startswith('appium:'):
            readable[key.replace('appium:', '')] = value
        else:
            readable[key] = value

    logger.info(f'{title}: {readable}')
