"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its lines.  Each line carries a
snapshot of the unit price and of the chosen variant taken at creation
time, so later catalog edits do not rewrite historical orders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from boutique.domain.exceptions import (
    EntityNotFoundError,
    InvalidQuantityError,
    ValidationError,
)
from boutique.domain.model.value_objects import DEFAULT_CURRENCY, Money, Quantity
from boutique.domain.model.variant import VariantKey
from boutique.domain.service.variant_resolver import resolve_line

LINE_KEY_SEPARATOR = "|"
MAX_PROGRESS = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(Enum):
    PENDING = "pending"


@dataclass(frozen=True)
class CustomerContact:
    name: str
    email: str
    phone: str

    def validated(self) -> CustomerContact:
        """Return a trimmed copy; every field is required."""
        return CustomerContact(
            name=_required(self.name, "Customer name"),
            email=_required(self.email, "Customer email"),
            phone=_required(self.phone, "Customer phone"),
        )


@dataclass(frozen=True)
class ShippingAddress:
    street: str
    city: str
    state: str
    country: str
    zipcode: str

    def validated(self) -> ShippingAddress:
        """Return a trimmed copy; every field is required."""
        return ShippingAddress(
            street=_required(self.street, "Street"),
            city=_required(self.city, "City"),
            state=_required(self.state, "State"),
            country=_required(self.country, "Country"),
            zipcode=_required(self.zipcode, "Zipcode"),
        )


@dataclass(frozen=True)
class VariantSnapshot:
    """The variant as it was chosen when the order was placed."""

    name: str
    image: str
    variant_id: str | None = None
    # Image shown only; it was not chosen and must not pick a variant.
    fallback_image: bool = False

    @property
    def key_image(self) -> str | None:
        return None if self.fallback_image else self.image

    def as_key(self) -> VariantKey:
        return VariantKey(variant_id=self.variant_id, image=self.key_image, name=self.name)


@dataclass
class OrderLine:
    """One product variant and a quantity.

    ``unit_price`` is locked at order-creation time; only ``quantity``
    changes afterwards, when part of the line is removed.
    """

    product_id: str
    quantity: Quantity
    unit_price: Money
    variant: VariantSnapshot

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def key(self) -> str:
        return f"{self.product_id}{LINE_KEY_SEPARATOR}{self.variant.name}"


def parse_line_key(line_key: str) -> tuple[str, VariantKey]:
    """Split ``"productId|variantName"`` into a product id and a variant key."""
    product_id, _, name = (line_key or "").partition(LINE_KEY_SEPARATOR)
    if not product_id.strip():
        raise ValidationError(f"Invalid line key: {line_key!r}")
    return product_id.strip(), VariantKey(name=name)


def order_total(lines: list[OrderLine], currency: str = DEFAULT_CURRENCY) -> Money:
    """Sum of unit price x quantity over *lines*, rounded half-up to the cent."""
    result = Money.zero(currency)
    for line in lines:
        result = result + line.line_total
    return result.rounded()


@dataclass
class Order:
    """Aggregate root for customer orders.

    Invariants:
    - a persisted order has at least one line
    - ``total_price`` equals the rounded sum of the line totals

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    customer: CustomerContact
    address: ShippingAddress
    lines: list[OrderLine]
    total_price: Money
    status: OrderStatus = OrderStatus.PENDING
    is_paid: bool = False
    is_delivered: bool = False
    line_progress: dict[str, int] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        customer: CustomerContact,
        address: ShippingAddress,
        lines: list[OrderLine],
    ) -> Order:
        """Create a new order, enforcing all invariants."""
        customer = customer.validated()
        address = address.validated()
        if not lines:
            raise ValidationError("Order must contain at least one line")

        currency = lines[0].unit_price.currency
        return Order(
            id=None,
            customer=customer,
            address=address,
            lines=list(lines),
            total_price=order_total(lines, currency),
        )

    # --- Line mutations -------------------------------------------------------

    def find_line(self, product_id: str, key: VariantKey) -> OrderLine:
        """Return the unique line for *product_id* matching *key*."""
        index = resolve_line(key, product_id, self.lines)
        if index is None:
            raise EntityNotFoundError(
                f"No matching line for product '{product_id}' in order #{self.id}"
            )
        return self.lines[index]

    def remove_from_line(self, line: OrderLine, quantity: int) -> int:
        """Take *quantity* units off *line*; drop the line when it reaches zero.

        Returns the quantity left on the line.  The total is recomputed.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantityError("Quantity to remove must be a positive integer")
        if quantity > line.quantity.value:
            raise InvalidQuantityError(
                f"Cannot remove {quantity}: line only has {line.quantity.value}"
            )

        remaining = line.quantity.value - quantity
        if remaining == 0:
            self.lines = [item for item in self.lines if item is not line]
            self.line_progress.pop(line.key, None)
        else:
            line.quantity = Quantity(remaining)
        self.recompute_total()
        return remaining

    def reprice(self, prices: dict[str, Money]) -> None:
        """Re-snapshot unit prices from *prices* (product id -> price).

        Lines whose product has no entry keep their snapshot price.
        """
        for line in self.lines:
            price = prices.get(line.product_id)
            if price is not None:
                line.unit_price = price.rounded()
        self.recompute_total()

    def recompute_total(self) -> None:
        self.total_price = order_total(self.lines, self.total_price.currency)
        self.updated_at = _utcnow()

    @property
    def is_empty(self) -> bool:
        return not self.lines

    # --- Flags ----------------------------------------------------------------

    def update_flags(
        self,
        is_paid: bool | None = None,
        is_delivered: bool | None = None,
        line_progress: dict[str, int] | None = None,
    ) -> None:
        """Change payment/delivery flags and per-line progress.

        Only the arguments that are given change.  A given ``line_progress``
        replaces the previous mapping.
        """
        if line_progress is not None:
            checked: dict[str, int] = {}
            for key, value in line_progress.items():
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValidationError(f"Progress for '{key}' must be an integer")
                if not 0 <= value <= MAX_PROGRESS:
                    raise ValidationError(
                        f"Progress for '{key}' must be between 0 and {MAX_PROGRESS}, got {value}"
                    )
                checked[key] = value
            self.line_progress = checked
        if is_paid is not None:
            self.is_paid = is_paid
        if is_delivered is not None:
            self.is_delivered = is_delivered
        self.updated_at = _utcnow()


def _required(value: str | None, label: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{label} is required")
    return str(value).strip()
