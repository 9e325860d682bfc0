"""Page objects for the Swag Labs sample app."""

from mobile_e2e.pages.base_page import BasePage
from mobile_e2e.pages.login_page import LoginPage
from mobile_e2e.pages.products_page import ProductsPage

__all__ = ["BasePage", "LoginPage", "ProductsPage"]
