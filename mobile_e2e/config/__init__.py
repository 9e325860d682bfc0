"""Configuration layer: environment-backed settings, constants and test data."""

from mobile_e2e.config.config import Config, Platform, SUPPORTED_PLATFORMS, normalize_platform
from mobile_e2e.config.test_data import TestData

__all__ = ["Config", "Platform", "SUPPORTED_PLATFORMS", "normalize_platform", "TestData"]
