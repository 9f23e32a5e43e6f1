"""Product aggregate.

Products live independently of orders. They have their own lifecycle:
prices change, variants are restocked, products are added to and removed
from the catalog.  The order engine only reads products and adjusts the
stock of their variants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from boutique.domain.exceptions import ValidationError
from boutique.domain.model.value_objects import Money
from boutique.domain.model.variant import VariantName, variant_name_from_raw

DEFAULT_IMAGE = "/assets/default-image.png"


@dataclass
class ProductVariant:
    """A purchasable color/style option with its own images and stock."""

    name: VariantName
    images: tuple[str, ...]
    stock: int = 0
    id: str | None = None

    @property
    def primary_image(self) -> str | None:
        return self.images[0] if self.images else None


@dataclass
class Product:
    """A product in the catalog.

    Invariants (after any successful mutation):
    - every ``variant.stock`` is >= 0
    - ``total_stock`` equals the sum of the variants' stock

    ``version`` is bumped by the repository on every save and used to
    detect concurrent stock updates.
    """

    id: str
    title: str
    price_current: Money
    price_base: Money
    variants: list[ProductVariant] = field(default_factory=list)
    cover_image: str = ""
    embroidery_category: dict[str, str] | None = None
    total_stock: int = 0
    version: int = 0

    # --- Factory (used for NEW products only) ---------------------------------

    @staticmethod
    def create(
        id: str,
        title: str,
        price_current: Money,
        price_base: Money,
        variants: list[ProductVariant],
        cover_image: str = "",
        embroidery_category: dict[str, str] | None = None,
    ) -> Product:
        if not title or not title.strip():
            raise ValidationError("Product title is required")
        if not variants:
            raise ValidationError("Product must have at least one variant")
        for variant in variants:
            if not variant.name.forms():
                raise ValidationError("Every variant needs a name")
            if not variant.images or not all(img.strip() for img in variant.images):
                raise ValidationError(
                    "Every variant needs at least one non-empty image"
                )
            if not isinstance(variant.stock, int) or variant.stock < 0:
                raise ValidationError("Variant stock must be a non-negative integer")

        product = Product(
            id=id,
            title=title.strip(),
            price_current=price_current,
            price_base=price_base,
            variants=list(variants),
            cover_image=(cover_image or "").strip() or variants[0].images[0],
            embroidery_category=embroidery_category,
        )
        product.recompute_total_stock()
        return product

    # --- Stock ----------------------------------------------------------------

    def adjust_stock(self, index: int, delta: int) -> int:
        """Apply a signed *delta* to one variant's stock, clamped at zero.

        Going below zero is never an error here: availability is a concern
        of order validation, not of the stock counters.  Returns the new
        stock of the variant.
        """
        variant = self.variants[index]
        variant.stock = max(0, variant.stock + delta)
        self.recompute_total_stock()
        return variant.stock

    def recompute_total_stock(self) -> None:
        self.total_stock = sum(v.stock for v in self.variants)

    # --- Display --------------------------------------------------------------

    @property
    def primary_image(self) -> str:
        if self.cover_image:
            return self.cover_image
        for variant in self.variants:
            if variant.primary_image:
                return variant.primary_image
        return DEFAULT_IMAGE


def variant_from_raw(raw: dict[str, Any]) -> ProductVariant:
    """Build a ProductVariant from a catalog document fragment.

    Accepts ``name`` or the storefront's ``colorName``, and a single
    ``image`` as well as an ``images`` list.
    """
    images = raw.get("images")
    if images is None and raw.get("image"):
        images = [raw["image"]]
    stock = raw.get("stock", 0)
    if isinstance(stock, bool) or not isinstance(stock, int):
        raise ValidationError(f"Variant stock must be an integer, got {stock!r}")
    variant_id = raw.get("id", raw.get("_id"))
    return ProductVariant(
        name=variant_name_from_raw(raw.get("name", raw.get("colorName"))),
        images=tuple(str(img).strip() for img in images or []),
        stock=stock,
        id=str(variant_id) if variant_id is not None else None,
    )
