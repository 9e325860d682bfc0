import pytest
from appium.webdriver.common.appiumby import AppiumBy

from mobile_e2e.core.locators import (
    Locator,
    LocatorStrategy,
    accessibility_id,
    class_chain,
    predicate,
    xpath,
)
from mobile_e2e.pages.locator_table import LOCATORS, locator_for


class TestLocator:

    def test_empty_selector_is_rejected(self):
        with pytest.raises(ValueError):
            Locator(LocatorStrategy.XPATH, '')

    def test_as_tuple_uses_appium_by_values(self):
        assert accessibility_id('test-Menu').as_tuple() == (AppiumBy.ACCESSIBILITY_ID, 'test-Menu')
        assert class_chain('**/X').by == AppiumBy.IOS_CLASS_CHAIN
        assert predicate('name == "x"').by == AppiumBy.IOS_PREDICATE

    def test_describe(self):
        assert str(xpath('//a')) == 'xpath=//a'
        assert accessibility_id('test-Cart').describe() == 'accessibility_id=test-Cart'

    def test_alternates_are_normalized_to_tuple(self):
        locator = Locator(LocatorStrategy.XPATH, '//a', [xpath('//b')])

        assert locator.alternates == (xpath('//b'),)
        assert hash(locator) == hash(xpath('//a', xpath('//b')))

    def test_chain_flattens_alternates(self):
        nested = xpath('//b', xpath('//c'))
        locator = xpath('//a', nested)

        chain = list(locator.chain())

        assert [item.selector for item in chain] == ['//a', '//b']
        assert all(item.alternates == () for item in chain)

    def test_derived_ios_alternates_only_for_accessibility_id(self):
        derived = accessibility_id('test-Menu').derived_ios_alternates()

        assert [item.strategy for item in derived] == [
            LocatorStrategy.CLASS_CHAIN,
            LocatorStrategy.PREDICATE_STRING,
        ]
        assert derived[0].selector == '**/XCUIElementTypeAny[`name == "test-Menu"`]'
        assert derived[1].selector == "name == 'test-Menu'"
        assert xpath('//a').derived_ios_alternates() == ()


class TestLocatorTable:

    def test_every_element_has_both_platforms(self):
        for name, by_platform in LOCATORS.items():
            assert set(by_platform) == {'android', 'ios'}, name

    def test_android_locators_have_no_alternates(self):
        for name in LOCATORS:
            assert locator_for(name, 'android').alternates == (), name

    def test_ios_login_fields_have_alternates(self):
        username = locator_for('username_field', 'ios')

        assert username.strategy is LocatorStrategy.ACCESSIBILITY_ID
        assert username.selector == 'test-Username'
        assert len(username.alternates) == 3

    def test_unknown_element(self):
        with pytest.raises(KeyError, match='Unknown element'):
            locator_for('checkout_button', 'android')
