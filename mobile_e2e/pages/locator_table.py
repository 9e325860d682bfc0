"""
Element locators per platform.

element name -> {platform -> Locator}. iOS entries carry ordered alternates;
Android builds expose stable content descriptions and need none.
"""

from typing import Dict

from mobile_e2e.config.config import Platform
from mobile_e2e.core.locators import Locator, accessibility_id, class_chain, predicate, xpath

ERROR_MESSAGE_TEXT = 'Username and password do not match'

LOCATORS: Dict[str, Dict[str, Locator]] = {
    # --- Login screen ---
    'username_field': {
        'android': xpath('//android.widget.EditText[@content-desc="test-Username"]'),
        'ios': accessibility_id(
            'test-Username',
            class_chain('**/XCUIElementTypeTextField[`name == "test-Username"`]'),
            predicate('name == "test-Username"'),
            xpath('//XCUIElementTypeTextField[@name="test-Username"]'),
        ),
    },
    'password_field': {
        'android': xpath('//android.widget.EditText[@content-desc="test-Password"]'),
        'ios': accessibility_id(
            'test-Password',
            class_chain('**/XCUIElementTypeSecureTextField[`name == "test-Password"`]'),
            predicate('name == "test-Password"'),
            xpath('//XCUIElementTypeSecureTextField[@name="test-Password"]'),
        ),
    },
    'login_button': {
        'android': xpath('//android.view.ViewGroup[@content-desc="test-LOGIN"]'),
        'ios': accessibility_id(
            'test-LOGIN',
            class_chain('**/XCUIElementTypeOther[`name == "test-LOGIN"`]'),
            predicate('name == "test-LOGIN"'),
            xpath('//XCUIElementTypeOther[@name="test-LOGIN"]'),
        ),
    },
    'error_message': {
        'android': xpath('//android.view.ViewGroup[@content-desc="test-Error message"]/android.widget.TextView'),
        'ios': xpath(
            '//XCUIElementTypeOther[@name="test-Error message"]/XCUIElementTypeStaticText',
            class_chain('**/XCUIElementTypeOther[`name == "test-Error message"`]/**/XCUIElementTypeStaticText'),
            predicate(f'name CONTAINS "{ERROR_MESSAGE_TEXT}"'),
            predicate(f'value CONTAINS "{ERROR_MESSAGE_TEXT}"'),
            xpath('//XCUIElementTypeStaticText[contains(@name, "Username and password")]'),
            xpath('//XCUIElementTypeStaticText[contains(@value, "Username and password")]'),
            accessibility_id('Username and password do not match any user in this service.'),
        ),
    },

    # --- Products screen ---
    'products_title': {
        'android': xpath(
            '//android.view.ViewGroup[@content-desc="test-Cart drop zone"]/android.view.ViewGroup/android.widget.TextView'
        ),
        'ios': xpath(
            '//XCUIElementTypeStaticText[@name="PRODUCTS"]',
            class_chain('**/XCUIElementTypeStaticText[`name == "PRODUCTS"`]'),
            predicate('name == "PRODUCTS"'),
        ),
    },
    'hamburger_menu': {
        'android': accessibility_id('test-Menu'),
        'ios': accessibility_id(
            'test-Menu',
            class_chain('**/XCUIElementTypeOther[`name == "test-Menu"`]'),
            xpath('//XCUIElementTypeOther[@name="test-Menu"]'),
        ),
    },
    'product_items': {
        'android': xpath('//android.view.ViewGroup[@content-desc="test-Item"]'),
        'ios': accessibility_id(
            'test-Item',
            class_chain('**/XCUIElementTypeOther[`name CONTAINS "test-Item"`]'),
            xpath('//XCUIElementTypeOther[contains(@name, "test-Item")]'),
        ),
    },
    'cart_icon': {
        'android': accessibility_id('test-Cart'),
        'ios': accessibility_id(
            'test-Cart',
            class_chain('**/XCUIElementTypeOther[`name == "test-Cart"`]'),
            xpath('//XCUIElementTypeOther[@name="test-Cart"]'),
        ),
    },

    # --- Menu ---
    'logout_menu_item': {
        'android': accessibility_id('test-LOGOUT'),
        'ios': accessibility_id(
            'test-LOGOUT',
            xpath('//XCUIElementTypeStaticText[@name="LOGOUT"]'),
            xpath("//XCUIElementTypeOther[contains(@name, 'LOGOUT')]"),
        ),
    },
}

# Broad XPath walked by the raw text scan when every error locator fails
STATIC_TEXT_XPATH: Dict[str, str] = {
    'android': '//android.widget.TextView',
    'ios': '//XCUIElementTypeStaticText',
}


def locator_for(name: str, platform: Platform) -> Locator:
    """
    Look up an element locator.

    Raises:
        KeyError: If the element or platform is unknown
    """
    try:
        by_platform = LOCATORS[name]
    except KeyError:
        raise KeyError(f'Unknown element: {name}') from None
    try:
        return by_platform[platform]
    except KeyError:
        raise KeyError(f'No {platform} locator for element: {name}') from None
