"""
Numeric constants for the test suite.

This module centralizes the timeouts, delays and attempt budgets used by the
locator resolver, page objects, app lifecycle manager and session orchestrator.
All times are in seconds unless the name says otherwise.
"""

# ========== Driver Session ==========

# Command timeout the Appium server applies to an idle session
NEW_COMMAND_TIMEOUT = 120

# Implicit wait applied after session creation; element waits poll explicitly
IMPLICIT_WAIT_DEFAULT = 0

# Appium /status probe timeout
APPIUM_STATUS_TIMEOUT = 3

# ========== Element Lookup ==========

ELEMENT_TIMEOUT_DEFAULT = 10
ELEMENT_POLL_INTERVAL = 0.5
FIND_ELEMENTS_TIMEOUT_DEFAULT = 5
DISPLAYED_CHECK_TIMEOUT_DEFAULT = 5
WAIT_FOR_ELEMENT_TIMEOUT_DEFAULT = 15

# iOS needs longer waits than Android for the same element
IOS_TIMEOUT_PADDING = 5

# Tap / text entry retry budget
ACTION_MAX_ATTEMPTS = 3
ACTION_RETRY_DELAY = 1.0

# ========== Page Waits ==========

LOGIN_PAGE_TIMEOUT_DEFAULT = 15
LOGIN_PAGE_WAIT_BEFORE_INPUT = 20
LOGIN_FIELD_PROBE_TIMEOUT = 2
PRODUCTS_PAGE_TIMEOUT_DEFAULT = 20
PRODUCTS_TITLE_PROBE_TIMEOUT = 2
CART_ICON_PROBE_TIMEOUT = 1
PAGE_POLL_INTERVAL = 1.0

ERROR_MESSAGE_TIMEOUT_ANDROID = 15
ERROR_MESSAGE_TIMEOUT_IOS = 25
ERROR_MESSAGE_MAX_ATTEMPTS = 3
ERROR_MESSAGE_RETRY_DELAY = 2.0

# ========== App Lifecycle ==========

# Pause between terminate and activate during a restart
RESTART_SETTLE_DELAY = 2.0

# Pause after activate to let the app reach the foreground
APP_LAUNCH_WAIT = 3.0

# Pause after activating a backgrounded app before probing the UI
ACTIVATE_WAIT = 2.0

RESTART_MAX_ATTEMPTS = 2
RESTART_RETRY_DELAY = 2.0

# ========== Session Preparation ==========

# Login screen polls after the non-destructive path (logout via menu)
PREPARE_LOGIN_POLL_TIMEOUT = 5
PREPARE_PRODUCTS_PROBE_TIMEOUT = 3
LOGOUT_SETTLE_DELAY = 2.0
MENU_OPEN_DELAY = 1.0

# Login screen wait after a restart or session recreation
PREPARE_AFTER_RESTART_TIMEOUT = 15

# Number of times a session may be discarded and recreated per group
MAX_SESSION_RECREATIONS = 1

# Window given to each alternate when only probing whether an element shows
ALTERNATE_PROBE_TIMEOUT = 1
