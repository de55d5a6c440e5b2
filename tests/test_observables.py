"""
Unit tests for currencies and market observables.
"""

import pickle

import pytest

from mc_valuation.primitives.dates import Tenor
from mc_valuation.primitives.observables import (
    JIBAR3M,
    USD,
    ZAR,
    Currency,
    CurrencyPair,
    DefaultRecovery,
    DefaultTime,
    FloatingIndex,
    ReferenceEntity,
    Share,
)


class TestCurrency:
    """Test suite for currencies."""

    def test_normalized_code(self):
        """Test that codes are stored upper case."""
        assert Currency("usd") == USD
        assert str(Currency(" zar ")) == "ZAR"

    def test_invalid_code(self):
        """Test that malformed codes are rejected."""
        with pytest.raises(ValueError, match="Invalid currency code"):
            Currency("US")
        with pytest.raises(ValueError, match="Invalid currency code"):
            Currency("U5D")


class TestMarketObservable:
    """Test suite for observable identity."""

    def test_equality_by_name(self):
        """Test that separately built observables compare equal."""
        assert FloatingIndex("jibar", Tenor.from_months(3)) == JIBAR3M
        assert FloatingIndex("JIBAR", Tenor.from_months(6)) != JIBAR3M
        assert Share("abc") == Share("ABC")

    def test_dictionary_key(self):
        """Test that observables work as dictionary keys."""
        table = {CurrencyPair(USD, ZAR): 1}
        assert table[CurrencyPair(USD, ZAR)] == 1
        assert CurrencyPair(ZAR, USD) not in table

    def test_names(self):
        """Test canonical names."""
        assert str(JIBAR3M) == "FLOATINGINDEX:JIBAR:3M"
        assert str(CurrencyPair(USD, ZAR)) == "FX:USDZAR"
        assert str(Share("abc")) == "SHARE:ABC"
        entity = ReferenceEntity("Acme")
        assert str(DefaultTime(entity)) == "DEFAULT:TIME:ACME"
        assert str(DefaultRecovery(entity)) == "DEFAULT:RECOVERYRATE:ACME"
        assert DefaultTime(entity) != DefaultRecovery(entity)

    def test_currency_pair_needs_two_currencies(self):
        """Test that a pair of one currency is rejected."""
        with pytest.raises(ValueError, match="two different currencies"):
            CurrencyPair(USD, USD)

    def test_immutable(self):
        """Test that observables cannot be modified."""
        with pytest.raises(AttributeError):
            JIBAR3M.tenor = Tenor.from_months(6)

    def test_pickle_keeps_type_and_fields(self):
        """Test that pickling keeps the subclass and its fields."""
        pair = pickle.loads(pickle.dumps(CurrencyPair(USD, ZAR)))
        assert isinstance(pair, CurrencyPair)
        assert pair.base == USD and pair.counter == ZAR

        share = pickle.loads(pickle.dumps(Share("abc", USD)))
        assert share.currency == USD
