import logging

from mobile_e2e.config.numeric_constants import (
    CART_ICON_PROBE_TIMEOUT,
    MENU_OPEN_DELAY,
    PAGE_POLL_INTERVAL,
    PRODUCTS_PAGE_TIMEOUT_DEFAULT,
    PRODUCTS_TITLE_PROBE_TIMEOUT,
)
from mobile_e2e.core.polling import poll_until
from mobile_e2e.infrastructure.appium_error_handler import AppiumError
from mobile_e2e.pages.base_page import BasePage

logger = logging.getLogger(__name__)


class ProductsPage(BasePage):
    """Product listing shown after a successful login."""

    def is_products_page_displayed(self, timeout: float = PRODUCTS_PAGE_TIMEOUT_DEFAULT) -> bool:
        return self.wait_for_products_page(timeout)

    def _products_page_visible(self) -> bool:
        if self.is_element_displayed('products_title', PRODUCTS_TITLE_PROBE_TIMEOUT):
            logger.info("Products page displayed successfully")
            return True
        if self.is_element_displayed('cart_icon', CART_ICON_PROBE_TIMEOUT):
            logger.info("Cart icon found, products page is displayed")
            return True
        return False

    def wait_for_products_page(self, timeout: float = PRODUCTS_PAGE_TIMEOUT_DEFAULT) -> bool:
        """Poll for the title or the cart icon; False and a screenshot on timeout."""
        logger.info("Waiting for products page...")
        started = self.context.clock.monotonic()
        displayed = poll_until(
            self._products_page_visible,
            timeout,
            interval=PAGE_POLL_INTERVAL,
            clock=self.context.clock,
            description='products page'
        )
        if displayed:
            return True

        elapsed = self.context.clock.monotonic() - started
        logger.warning(f"Timed out waiting for products page after {elapsed:.1f} seconds")
        self.take_screenshot("products_page_timeout.png")
        return False

    def get_title_text(self) -> str:
        try:
            text = self.find_element('products_title').text
        except Exception as e:
            logger.error(f"Failed to get products title: {e}")
            self.take_screenshot("products_title_error.png")
            return ""
        logger.info(f"Products page title: {text}")
        return text

    def open_hamburger_menu(self) -> None:
        logger.info("Opening hamburger menu")
        self.tap('hamburger_menu')

    def get_product_count(self) -> int:
        try:
            count = len(self.find_elements('product_items'))
        except Exception as e:
            logger.error(f"Failed to get product count: {e}")
            return 0
        logger.info(f"Found {count} product items")
        return count

    def logout(self) -> bool:
        """Log out through the menu; False if the menu or the item failed."""
        try:
            self.open_hamburger_menu()
            self.context.clock.sleep(MENU_OPEN_DELAY)
            self.tap('logout_menu_item')
        except AppiumError as e:
            logger.warning(f"Logout through menu failed: {e}")
            return False
        logger.info("Clicked logout button")
        return True
