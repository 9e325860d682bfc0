"""
Mobile end-to-end test suite for the Swag Labs sample app.

Layers:
- config: environment-backed configuration and test data
- infrastructure: Appium driver creation, capabilities and error taxonomy
- core: polling, retry, locator resolution, app lifecycle and session orchestration
- pages: page objects built on the core layer
- utils: logging and artifact helpers
"""

__version__ = "0.1.0"
