"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI and REST layers can catch them uniformly and display
user-friendly messages.
"""


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class InvalidQuantityError(ValidationError):
    """A quantity to remove from an order line is out of bounds."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class ConcurrencyError(DomainException):
    """A product was modified by someone else since it was loaded."""


class StockLedgerError(DomainException):
    """A stock adjustment could not be applied.

    Ledger failures are best-effort: they are logged and recorded on the
    stock adjustment, never surfaced as a failure of the order operation
    that triggered them.
    """


class ProductMissingError(StockLedgerError):
    """The product referenced by a stock adjustment does not exist."""


class VariantNotFoundError(StockLedgerError):
    """No unique variant of the product matches the variant key."""
