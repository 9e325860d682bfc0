from unittest.mock import patch

import pytest
from selenium.common.exceptions import ElementClickInterceptedException, WebDriverException

from mobile_e2e.infrastructure.appium_error_handler import ActionFailedError, ElementNotFoundError
from mobile_e2e.pages import BasePage, LoginPage, ProductsPage
from mobile_e2e.pages.locator_table import ERROR_MESSAGE_TEXT, STATIC_TEXT_XPATH, locator_for

ERROR_TEXT = 'Username and password do not match any user in this service.'


def add(driver, name, platform='android', **kwargs):
    by, value = locator_for(name, platform).as_tuple()
    return driver.add_element(by, value, **kwargs)


def screenshots_starting_with(driver, prefix):
    return [name for name in driver.screenshots if name.startswith(prefix)]


class TestBasePage:

    def test_tap_clicks_element(self, fake_driver, android_context):
        button = add(fake_driver, 'login_button')

        BasePage(fake_driver, android_context).tap('login_button')

        assert button.clicks == 1

    def test_tap_falls_back_to_touch_tap_at_center(self, fake_driver, android_context):
        add(fake_driver, 'login_button', click_error=ElementClickInterceptedException("covered"))
        page = BasePage(fake_driver, android_context)

        with patch.object(BasePage, 'perform_w3c_tap') as touch_tap:
            page.tap('login_button')

        touch_tap.assert_called_once_with(60.0, 40.0)

    def test_tap_failure_raises_action_failed(self, fake_driver, android_context, fake_clock):
        page = BasePage(fake_driver, android_context)

        with pytest.raises(ActionFailedError) as exc_info:
            page.tap('login_button', timeout=1)

        assert exc_info.value.action == 'tap'
        assert isinstance(exc_info.value.cause, ElementNotFoundError)
        assert fake_clock.sleeps.count(1.0) >= 2
        assert screenshots_starting_with(fake_driver, 'tap_error_')

    def test_input_text_replaces_contents(self, fake_driver, android_context):
        field = add(fake_driver, 'username_field')

        BasePage(fake_driver, android_context).input_text('username_field', 'standard_user')

        assert field.cleared == 1
        assert field.keys == ['standard_user']

    def test_wait_for_element_adds_ios_padding(self, fake_driver, ios_context, fake_clock):
        page = BasePage(fake_driver, ios_context)

        with pytest.raises(ElementNotFoundError, match='after waiting 7 seconds'):
            page.wait_for_element('cart_icon', timeout=2)

        # primary plus two alternates, 7s each
        assert fake_clock.now == 21
        assert screenshots_starting_with(fake_driver, 'wait_error_')

    def test_is_element_displayed(self, fake_driver, android_context):
        page = BasePage(fake_driver, android_context)
        add(fake_driver, 'cart_icon')

        assert page.is_element_displayed('cart_icon', timeout=1) is True
        assert page.is_element_displayed('hamburger_menu', timeout=1) is False

    def test_swipe_falls_back_to_drag_gesture(self, fake_driver, android_context):
        page = BasePage(fake_driver, android_context)

        # FakeDriver has no W3C actions endpoint
        with patch('mobile_e2e.pages.base_page.ActionChains') as chains:
            chains.return_value.perform.side_effect = WebDriverException("unsupported")
            page.swipe(10, 500, 10, 100)

        assert fake_driver.scripts == [
            ('mobile: dragGesture', {'startX': 10, 'startY': 500, 'endX': 10, 'endY': 100})
        ]


class TestLoginPage:

    def test_login_fills_form_and_taps(self, fake_driver, android_context):
        username = add(fake_driver, 'username_field')
        password = add(fake_driver, 'password_field')
        button = add(fake_driver, 'login_button')

        LoginPage(fake_driver, android_context).login('standard_user', 'secret_sauce')

        assert username.keys == ['standard_user']
        assert password.keys == ['secret_sauce']
        assert button.clicks == 1
        assert 'before_login_tap.png' in fake_driver.screenshots

    def test_error_message_android(self, fake_driver, android_context):
        add(fake_driver, 'error_message', text=ERROR_TEXT)

        assert LoginPage(fake_driver, android_context).get_error_message() == ERROR_TEXT
        assert 'waiting_for_error_0.png' in fake_driver.screenshots

    def test_error_message_missing_returns_empty(self, fake_driver, android_context, fake_clock):
        page = LoginPage(fake_driver, android_context)

        assert page.get_error_message() == ""
        assert fake_clock.sleeps.count(2.0) == 2
        assert 'waiting_for_error_2.png' in fake_driver.screenshots
        assert 'error_message_final_failure.png' in fake_driver.screenshots

    def test_error_message_ios_text_scan(self, fake_driver, ios_context):
        fake_driver.add_element('xpath', STATIC_TEXT_XPATH['ios'], text='LOGIN')
        fake_driver.add_element('xpath', STATIC_TEXT_XPATH['ios'], text=ERROR_TEXT)

        message = LoginPage(fake_driver, ios_context).get_error_message()

        assert ERROR_MESSAGE_TEXT in message

    def test_login_page_detection(self, fake_driver, android_context):
        page = LoginPage(fake_driver, android_context)
        assert page.is_login_page_displayed(timeout=2) is False
        assert 'login_page_timeout.png' in fake_driver.screenshots

        add(fake_driver, 'username_field')
        assert page.is_login_page_displayed(timeout=2) is True


class TestProductsPage:

    def test_displayed_via_cart_icon(self, fake_driver, android_context):
        add(fake_driver, 'cart_icon')

        assert ProductsPage(fake_driver, android_context).is_products_page_displayed(timeout=3) is True

    def test_not_displayed(self, fake_driver, android_context):
        page = ProductsPage(fake_driver, android_context)

        assert page.is_products_page_displayed(timeout=3) is False
        assert 'products_page_timeout.png' in fake_driver.screenshots

    def test_title_text(self, fake_driver, android_context):
        add(fake_driver, 'products_title', text='PRODUCTS')

        assert ProductsPage(fake_driver, android_context).get_title_text() == 'PRODUCTS'

    def test_product_count(self, fake_driver, android_context):
        page = ProductsPage(fake_driver, android_context)
        assert page.get_product_count() == 0

        for _ in range(3):
            add(fake_driver, 'product_items')
        assert page.get_product_count() == 3

    def test_logout(self, fake_driver, android_context, fake_clock):
        menu = add(fake_driver, 'hamburger_menu')
        item = add(fake_driver, 'logout_menu_item')

        assert ProductsPage(fake_driver, android_context).logout() is True
        assert menu.clicks == 1
        assert item.clicks == 1
        assert 1.0 in fake_clock.sleeps

    def test_logout_without_menu_item(self, fake_driver, android_context):
        add(fake_driver, 'hamburger_menu')

        assert ProductsPage(fake_driver, android_context).logout() is False
