"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI/REST layers and the application layer
without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from boutique.domain.model.order import Order, OrderLine
from boutique.domain.model.product import DEFAULT_IMAGE, Product
from boutique.domain.model.variant import VariantKey


@dataclass(frozen=True)
class OrderLineSpec:
    """Input: one requested line (product, quantity, optional variant).

    ``client_price`` is informational only; the unit price always comes
    from the catalog.
    """

    product_id: str
    quantity: int
    variant: VariantKey = field(default_factory=VariantKey)
    client_price: str | None = None


@dataclass(frozen=True)
class OrderLineDTO:
    """Output: a single order line with denormalized product fields."""

    product_id: str
    key: str
    quantity: int
    unit_price: str
    line_total: str
    variant_name: str
    variant_image: str
    product_title: str | None
    cover_image: str | None
    embroidery_category: dict[str, str] | None


@dataclass(frozen=True)
class OrderDTO:
    """Output: a complete order."""

    id: int
    name: str
    email: str
    phone: str
    address: dict[str, str]
    status: str
    is_paid: bool
    is_delivered: bool
    lines: list[OrderLineDTO]
    total_price: str
    currency: str
    line_progress: dict[str, int]
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class RemoveLineResult:
    order_id: int
    remaining_quantity: int
    order_deleted: bool
    total_price: str | None


def _amount(value) -> str:
    return f"{value.amount:.2f}"


def _line_to_dto(
    line: OrderLine,
    product: Product | None,
    default_cover: str | None,
) -> OrderLineDTO:
    return OrderLineDTO(
        product_id=line.product_id,
        key=line.key,
        quantity=line.quantity.value,
        unit_price=_amount(line.unit_price),
        line_total=_amount(line.line_total),
        variant_name=line.variant.name,
        variant_image=line.variant.image,
        product_title=product.title if product else None,
        cover_image=product.primary_image if product else default_cover,
        embroidery_category=product.embroidery_category if product else None,
    )


def order_to_dto(
    order: Order,
    products: Mapping[str, Product | None],
    hide_orphan_lines: bool = False,
) -> OrderDTO:
    """Map an order to its DTO, joining product display fields.

    With ``hide_orphan_lines`` the lines whose product no longer exists are
    left out of the view and a missing cover image falls back to the
    default asset; otherwise such lines are shown without product fields.
    """
    lines = [
        _line_to_dto(
            line,
            products.get(line.product_id),
            DEFAULT_IMAGE if hide_orphan_lines else None,
        )
        for line in order.lines
        if not hide_orphan_lines or products.get(line.product_id) is not None
    ]
    address = order.address
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        name=order.customer.name,
        email=order.customer.email,
        phone=order.customer.phone,
        address={
            "street": address.street,
            "city": address.city,
            "state": address.state,
            "country": address.country,
            "zipcode": address.zipcode,
        },
        status=order.status.value,
        is_paid=order.is_paid,
        is_delivered=order.is_delivered,
        lines=lines,
        total_price=_amount(order.total_price),
        currency=order.total_price.currency,
        line_progress=dict(order.line_progress),
        created_at=order.created_at.isoformat(),
        updated_at=order.updated_at.isoformat(),
    )
