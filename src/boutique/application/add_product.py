"""Application service: Add Product use case.

A minimal catalog entry point, enough to seed products whose variants
the order engine can then sell and restock.
"""

from __future__ import annotations

from typing import Any

from boutique.domain.exceptions import ValidationError
from boutique.domain.model.product import Product, variant_from_raw
from boutique.domain.model.value_objects import DEFAULT_CURRENCY, Money
from boutique.domain.repository.product_repository import ProductRepository


class AddProductHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        currency: str = DEFAULT_CURRENCY,
    ) -> None:
        self._product_repo = product_repo
        self._currency = currency

    def handle(self, document: dict[str, Any]) -> Product:
        """Add a new product described by a catalog *document*.

        Understands ``variants`` or the storefront's ``colors``, and
        ``priceCurrent``/``newPrice`` and ``priceBase``/``oldPrice``.
        """
        raw_variants = document.get("variants", document.get("colors")) or []
        if not isinstance(raw_variants, list):
            raise ValidationError("Variants must be a list")
        price_current = document.get("priceCurrent", document.get("newPrice"))
        if price_current is None:
            raise ValidationError("Current price is required")
        price_base = document.get("priceBase", document.get("oldPrice", price_current))

        # Auto-assign ID based on existing products
        all_products = self._product_repo.list_all()
        numeric_ids = [int(p.id) for p in all_products if p.id.isdigit()]
        next_id = str(max(numeric_ids) + 1) if numeric_ids else "1"

        product = Product.create(
            id=str(document.get("id") or next_id),
            title=str(document.get("title", "")),
            price_current=Money.of(price_current, self._currency),
            price_base=Money.of(price_base, self._currency),
            variants=[variant_from_raw(raw) for raw in raw_variants],
            cover_image=str(document.get("coverImage", "") or ""),
            embroidery_category=document.get("embroideryCategory"),
        )
        if self._product_repo.get_by_id(product.id) is not None:
            raise ValidationError(f"Product '{product.id}' already exists")

        self._product_repo.save(product)
        return product
