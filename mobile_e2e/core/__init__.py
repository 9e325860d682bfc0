"""
Core recovery layer: polling, retry, locator resolution, app lifecycle and
session orchestration.
"""

__all__ = []
