"""
Exceptions raised during a valuation.

Every error here aborts the valuation it occurs in. Each carries the
objects needed to locate the problem (product, observable, simulator, date)
as attributes in addition to a readable message.
"""


class ValuationError(Exception):
    """Base class for errors that abort a valuation."""

    # Constructor arguments, so errors raised in worker processes unpickle.
    _init_args: tuple = ()

    def __reduce__(self):
        if self._init_args:
            return (type(self), self._init_args)
        return super().__reduce__()


class UnresolvedObservableError(ValuationError):
    """A product requires an observable that no configured simulator provides."""

    def __init__(self, product, observable):
        self._init_args = (product, observable)
        self.product = product
        self.observable = observable
        super().__init__(
            f"Required index {observable} of product {product!r} "
            f"is not provided by any of the simulators"
        )


class UnsupportedQueryError(ValuationError):
    """
    A simulator was asked for an observable it does not provide, or for a
    scalar-only observable with more than one date.
    """

    def __init__(self, simulator, observable, reason: str | None = None):
        self._init_args = (simulator, observable, reason)
        self.simulator = simulator
        self.observable = observable
        message = reason or f"{observable} is not simulated by this model"
        super().__init__(f"{type(simulator).__name__}: {message}")


class CurrencyMismatchError(ValuationError):
    """A cashflow currency differs from the numeraire currency."""

    def __init__(self, product, date, cashflow_currency, numeraire_currency):
        self._init_args = (product, date, cashflow_currency, numeraire_currency)
        self.product = product
        self.date = date
        self.cashflow_currency = cashflow_currency
        self.numeraire_currency = numeraire_currency
        super().__init__(
            f"Cashflow of product {product!r} on {date} is in {cashflow_currency} "
            f"but the numeraire is in {numeraire_currency}"
        )


class StateOrderError(ValuationError):
    """A simulator method was called out of the reset/prepare/simulate order."""

    def __init__(self, simulator, operation: str, state: str):
        self._init_args = (simulator, operation, state)
        self.simulator = simulator
        self.operation = operation
        self.state = state
        super().__init__(
            f"{type(simulator).__name__}.{operation} is not allowed in state '{state}'"
        )


class RegressionDegeneracyError(ValuationError):
    """A continuation value regression cannot be fitted."""

    def __init__(self, date, message: str):
        self._init_args = (date, message)
        self.date = date
        super().__init__(f"Regression at {date}: {message}")
