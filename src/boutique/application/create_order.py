"""Application service: Create Order use case.

Orchestrates the flow between repositories, the domain model and the
stock synchronizer:

1. Validate the customer, the address and every requested line before
   anything is written.
2. Build order lines with the *current* catalog price (snapshot) and a
   snapshot of the chosen variant.
3. Persist the order.
4. Decrement stock once per line, best-effort.
"""

from __future__ import annotations

import structlog

from boutique.application.dto import OrderDTO, OrderLineSpec, order_to_dto
from boutique.application.stock_sync import StockDelta, StockSynchronizer
from boutique.domain.exceptions import ValidationError
from boutique.domain.model.order import (
    CustomerContact,
    Order,
    OrderLine,
    ShippingAddress,
    VariantSnapshot,
)
from boutique.domain.model.product import Product
from boutique.domain.model.stock_adjustment import AdjustmentReason
from boutique.domain.model.value_objects import Quantity
from boutique.domain.model.variant import (
    DEFAULT_LOCALES,
    PLACEHOLDER_VARIANT_NAME,
    VariantKey,
    display_name,
)
from boutique.domain.repository.order_repository import OrderRepository
from boutique.domain.repository.product_repository import ProductRepository
from boutique.domain.service.variant_resolver import resolve_variant

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        stock_sync: StockSynchronizer,
        locales: tuple[str, ...] = DEFAULT_LOCALES,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._stock_sync = stock_sync
        self._locales = locales

    def handle(
        self,
        customer: CustomerContact,
        address: ShippingAddress,
        line_specs: list[OrderLineSpec],
    ) -> OrderDTO:
        customer = customer.validated()
        address = address.validated()
        if not line_specs:
            raise ValidationError("Order must contain at least one line")

        products: dict[str, Product] = {}
        # (product_id, snapshot) -> [quantity, unit_price]
        merged: dict[tuple[str, VariantSnapshot], list] = {}

        for spec in line_specs:
            quantity = Quantity(spec.quantity)
            product = products.get(spec.product_id) or self._product_repo.get_by_id(
                spec.product_id
            )
            if product is None:
                raise ValidationError(f"Product not found: '{spec.product_id}'")
            products[product.id] = product

            snapshot = self._snapshot(product, spec.variant)
            entry = merged.setdefault(
                (product.id, snapshot), [0, product.price_current.rounded()]
            )
            entry[0] += quantity.value

        lines = [
            OrderLine(
                product_id=product_id,
                quantity=Quantity(qty),
                unit_price=unit_price,  # <-- price snapshot
                variant=snapshot,
            )
            for (product_id, snapshot), (qty, unit_price) in merged.items()
        ]

        order = Order.create(customer=customer, address=address, lines=lines)
        self._order_repo.save(order)
        logger.info(
            "order_created",
            order_id=order.id,
            lines=len(order.lines),
            total_price=str(order.total_price),
        )

        self._stock_sync.submit(
            order.id,  # type: ignore[arg-type]
            AdjustmentReason.ORDER_CREATED,
            [
                StockDelta(line.product_id, line.variant.as_key(), -line.quantity.value)
                for line in order.lines
            ],
        )

        return order_to_dto(order, products)

    # --- Snapshot -------------------------------------------------------------

    def _snapshot(self, product: Product, key: VariantKey) -> VariantSnapshot:
        """Freeze the chosen variant's name and image onto the line.

        Requested values win; otherwise the matched catalog variant fills
        them in; otherwise the placeholder name and the product's primary
        image are used.

        When a variant was requested but matched nothing, the primary image
        is kept for display only so the stock update cannot land on
        whichever variant owns that image.
        """
        variant = None
        if not key.is_empty:
            index = resolve_variant(key, product.variants)
            if index is not None:
                variant = product.variants[index]

        name = key.name
        if not name and variant is not None:
            name = display_name(variant.name, self._locales)
        image = key.image
        if not image and variant is not None:
            image = variant.primary_image

        return VariantSnapshot(
            name=name or PLACEHOLDER_VARIANT_NAME,
            image=image or product.primary_image,
            variant_id=variant.id if variant is not None else key.variant_id,
            fallback_image=not image and not key.is_empty,
        )
