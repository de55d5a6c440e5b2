"""
Currencies and market observables.

A market observable identifies a quantity that a simulator can produce: a
floating rate index, an FX pair, a share price, a default time or a default
recovery rate. Observables compare by their canonical name only, so two
separately constructed instances describing the same quantity are
interchangeable as dictionary keys.
"""

from dataclasses import dataclass

from mc_valuation.primitives.dates import Tenor


@dataclass(frozen=True)
class Currency:
    """
    ISO currency.

    Attributes
    ----------
    code : str
        Three letter ISO code, stored upper case
    """
    code: str

    def __post_init__(self):
        code = self.code.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError(f"Invalid currency code: {self.code!r}")
        object.__setattr__(self, "code", code)

    def __str__(self) -> str:
        return self.code


ZAR = Currency("ZAR")
USD = Currency("USD")
EUR = Currency("EUR")
GBP = Currency("GBP")


class MarketObservable:
    """
    Base class for simulatable market quantities.

    Subclasses build a canonical name in ``__init__`` and pass it to this
    constructor. Equality, hashing and ``str`` all use that name.
    """

    __slots__ = ("_name",)

    def __init__(self, name: str):
        object.__setattr__(self, "_name", name.upper())

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def name(self) -> str:
        return self._name

    def __eq__(self, other) -> bool:
        if not isinstance(other, MarketObservable):
            return NotImplemented
        return self._name == other._name

    def __hash__(self) -> int:
        return hash(self._name)

    def __reduce__(self):
        return (MarketObservable, (self._name,))

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"{type(self).__name__}('{self._name}')"


class FloatingIndex(MarketObservable):
    """A floating interest rate index such as JIBAR 3M."""

    __slots__ = ("index_name", "tenor")

    def __init__(self, index_name: str, tenor: Tenor):
        super().__init__(f"FLOATINGINDEX:{index_name}:{tenor}")
        object.__setattr__(self, "index_name", index_name.upper())
        object.__setattr__(self, "tenor", tenor)

    def __reduce__(self):
        return (FloatingIndex, (self.index_name, self.tenor))


class CurrencyPair(MarketObservable):
    """
    An FX rate quoted as units of ``counter`` per one unit of ``base``.

    ``CurrencyPair(USD, ZAR)`` is the USDZAR rate, i.e. rand per dollar.
    """

    __slots__ = ("base", "counter")

    def __init__(self, base: Currency, counter: Currency):
        if base == counter:
            raise ValueError("Currency pair needs two different currencies")
        super().__init__(f"FX:{base.code}{counter.code}")
        object.__setattr__(self, "base", base)
        object.__setattr__(self, "counter", counter)

    def __reduce__(self):
        return (CurrencyPair, (self.base, self.counter))


class Share(MarketObservable):
    """The price of a traded share, denominated in ``currency``."""

    __slots__ = ("code", "currency")

    def __init__(self, code: str, currency: Currency = ZAR):
        super().__init__(f"SHARE:{code}")
        object.__setattr__(self, "code", code.upper())
        object.__setattr__(self, "currency", currency)

    def __reduce__(self):
        return (Share, (self.code, self.currency))


@dataclass(frozen=True)
class ReferenceEntity:
    """A legal entity whose default is being modelled."""
    name: str

    def __str__(self) -> str:
        return self.name.upper()


class DefaultTime(MarketObservable):
    """
    The default time of a reference entity, as a serial day number.

    A scalar per path: it can only be queried with a single date.
    """

    __slots__ = ("entity",)

    def __init__(self, entity: ReferenceEntity):
        super().__init__(f"DEFAULT:TIME:{entity}")
        object.__setattr__(self, "entity", entity)

    def __reduce__(self):
        return (DefaultTime, (self.entity,))


class DefaultRecovery(MarketObservable):
    """
    The recovery rate in a default event of a reference entity.

    It is undefined until there is a default; simulators report NaN for it
    before default so that it cannot be consumed by accident.
    """

    __slots__ = ("entity",)

    def __init__(self, entity: ReferenceEntity):
        super().__init__(f"DEFAULT:RECOVERYRATE:{entity}")
        object.__setattr__(self, "entity", entity)

    def __reduce__(self):
        return (DefaultRecovery, (self.entity,))


JIBAR3M = FloatingIndex("JIBAR", Tenor.from_months(3))
LIBOR3M = FloatingIndex("LIBOR", Tenor.from_months(3))
LIBOR6M = FloatingIndex("LIBOR", Tenor.from_months(6))
EURIBOR6M = FloatingIndex("EURIBOR", Tenor.from_months(6))
