"""Domain service: Stock Ledger.

Applies a signed quantity delta to one variant of one product and keeps
the product's ``total_stock`` equal to the sum of its variants' stock.

Each application is a read-modify-write of the product.  The repository
rejects a save whose version is stale, and the ledger then re-reads the
product and tries again, so two concurrent orders for the same variant
cannot silently overwrite each other's decrement.
"""

from __future__ import annotations

import structlog

from boutique.domain.exceptions import (
    ConcurrencyError,
    ProductMissingError,
    StockLedgerError,
    VariantNotFoundError,
)
from boutique.domain.model.product import Product
from boutique.domain.model.variant import VariantKey
from boutique.domain.repository.product_repository import ProductRepository
from boutique.domain.service.variant_resolver import resolve_variant

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


class StockLedger:

    def __init__(
        self,
        product_repo: ProductRepository,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._product_repo = product_repo
        self._max_attempts = max_attempts

    def decrement(self, product_id: str, key: VariantKey, quantity: int) -> Product:
        """Take *quantity* units out of stock (an order line was placed)."""
        return self.apply_delta(product_id, key, -quantity)

    def restore(self, product_id: str, key: VariantKey, quantity: int) -> Product:
        """Put *quantity* units back in stock (a line was removed or deleted)."""
        return self.apply_delta(product_id, key, quantity)

    def apply_delta(self, product_id: str, key: VariantKey, delta: int) -> Product:
        """Apply *delta* to the variant of *product_id* that *key* refers to.

        Stock is clamped at zero.  Raises ProductMissingError or
        VariantNotFoundError when the target cannot be found, and
        StockLedgerError when every attempt lost a concurrent update.
        """
        for attempt in range(1, self._max_attempts + 1):
            product = self._product_repo.get_by_id(product_id)
            if product is None:
                raise ProductMissingError(f"Product '{product_id}' not found")

            index = resolve_variant(key, product.variants)
            if index is None:
                raise VariantNotFoundError(
                    f"No unique variant of product '{product_id}' matches {key}"
                )

            new_stock = product.adjust_stock(index, delta)
            try:
                self._product_repo.save(product)
            except ConcurrencyError:
                logger.warning(
                    "stock_update_conflict",
                    product_id=product_id,
                    attempt=attempt,
                    max_attempts=self._max_attempts,
                )
                continue

            logger.info(
                "stock_adjusted",
                product_id=product_id,
                variant_index=index,
                delta=delta,
                stock=new_stock,
                total_stock=product.total_stock,
            )
            return product

        raise StockLedgerError(
            f"Stock of product '{product_id}' kept changing; "
            f"gave up after {self._max_attempts} attempts"
        )
