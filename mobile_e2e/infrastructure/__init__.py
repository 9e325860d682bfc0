"""
Infrastructure layer for the Appium driver boundary.

This module contains driver creation, capability building and the error
taxonomy. It does not depend on page objects or session orchestration.
"""

# Import directly from submodules when needed

__all__ = []
