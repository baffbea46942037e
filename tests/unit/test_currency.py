"""Tests for the ISO 4217 currency registry."""

import dataclasses

import pytest

from dealbook_kernel.domain.currency import CurrencyInfo, CurrencyRegistry
from dealbook_kernel.exceptions import InvalidCurrencyError


class TestCurrencyRegistry:
    @pytest.mark.parametrize(
        "code, places",
        [("JPY", 0), ("KRW", 0), ("USD", 2), ("EUR", 2), ("BHD", 3), ("KWD", 3)],
    )
    def test_decimal_places(self, code, places):
        assert CurrencyRegistry.get_decimal_places(code) == places

    def test_lookup_is_case_and_space_insensitive(self):
        assert CurrencyRegistry.is_valid(" usd ")
        assert CurrencyRegistry.get_info("jpy").code == "JPY"

    @pytest.mark.parametrize("code", ["", "XXX", "US", None, 840])
    def test_unknown_codes_invalid(self, code):
        assert not CurrencyRegistry.is_valid(code)

    def test_unknown_code_raises(self):
        with pytest.raises(InvalidCurrencyError) as exc_info:
            CurrencyRegistry.get_info("ABC")

        assert exc_info.value.code == "INVALID_CURRENCY"
        assert exc_info.value.currency == "ABC"

    def test_all_codes(self):
        codes = CurrencyRegistry.all_codes()
        assert {"JPY", "USD", "EUR"} <= codes
        assert isinstance(codes, frozenset)


class TestCurrencyInfo:
    def test_frozen(self):
        info = CurrencyRegistry.get_info("USD")
        with pytest.raises(dataclasses.FrozenInstanceError):
            info.decimal_places = 0

    def test_registry_entries_match_codes(self):
        for code in CurrencyRegistry.all_codes():
            info = CurrencyRegistry.get_info(code)
            assert isinstance(info, CurrencyInfo)
            assert info.code == code
            assert info.decimal_places in (0, 2, 3)
