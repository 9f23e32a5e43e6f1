"""Application service: Remove Order Line use case.

Takes part (or all) of one line off an order and puts the removed units
back in stock.  Removing the last unit of the last line deletes the order:
an order without lines is never stored.

How the total is recomputed depends on the repricing policy:

- ``CATALOG`` (default) re-snapshots every remaining line at the product's
  current price first (lines whose product is gone keep their old price);
- ``SNAPSHOT`` keeps the unit prices captured when the order was placed.

Either way the stored total equals the sum of the stored line totals.
"""

from __future__ import annotations

from enum import Enum

import structlog

from boutique.application.dto import RemoveLineResult
from boutique.application.stock_sync import StockDelta, StockSynchronizer
from boutique.domain.exceptions import EntityNotFoundError, InvalidQuantityError
from boutique.domain.model.order import Order
from boutique.domain.model.stock_adjustment import AdjustmentReason
from boutique.domain.model.value_objects import Money
from boutique.domain.model.variant import VariantKey
from boutique.domain.repository.order_repository import OrderRepository
from boutique.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


class RepricingPolicy(Enum):
    SNAPSHOT = "snapshot"
    CATALOG = "catalog"


class RemoveOrderLineHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        stock_sync: StockSynchronizer,
        repricing: RepricingPolicy = RepricingPolicy.CATALOG,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._stock_sync = stock_sync
        self._repricing = repricing

    def handle(
        self,
        order_id: int,
        product_id: str,
        key: VariantKey,
        quantity: int,
    ) -> RemoveLineResult:
        # Bounds that do not depend on the line are checked first.
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantityError("Quantity to remove must be a positive integer")

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        line = order.find_line(product_id, key)
        restore_key = line.variant.as_key()
        remaining = order.remove_from_line(line, quantity)

        if order.is_empty:
            self._order_repo.delete(order_id)
            logger.info("order_emptied_and_deleted", order_id=order_id)
            total = None
        else:
            if self._repricing is RepricingPolicy.CATALOG:
                order.reprice(self._current_prices(order))
            self._order_repo.save(order)
            total = f"{order.total_price.amount:.2f}"

        logger.info(
            "order_line_removed",
            order_id=order_id,
            product_id=product_id,
            removed=quantity,
            remaining=remaining,
        )

        self._stock_sync.submit(
            order_id,
            AdjustmentReason.LINE_REMOVED,
            [StockDelta(product_id, restore_key, quantity)],
        )

        return RemoveLineResult(
            order_id=order_id,
            remaining_quantity=remaining,
            order_deleted=order.is_empty,
            total_price=total,
        )

    def _current_prices(self, order: Order) -> dict[str, Money]:
        prices: dict[str, Money] = {}
        for product_id in {line.product_id for line in order.lines}:
            product = self._product_repo.get_by_id(product_id)
            if product is not None:
                prices[product_id] = product.price_current
        return prices
