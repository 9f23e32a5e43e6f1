"""Application service: List Products query (read-only)."""

from __future__ import annotations

from dataclasses import dataclass

from boutique.domain.model.variant import DEFAULT_LOCALES, display_name
from boutique.domain.repository.product_repository import ProductRepository


@dataclass(frozen=True)
class VariantStockDTO:
    name: str
    image: str
    stock: int


@dataclass(frozen=True)
class ProductDTO:
    id: str
    title: str
    price_current: str
    price_base: str
    currency: str
    cover_image: str
    total_stock: int
    variants: list[VariantStockDTO]


class ListProductsHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        locales: tuple[str, ...] = DEFAULT_LOCALES,
    ) -> None:
        self._product_repo = product_repo
        self._locales = locales

    def handle(self) -> list[ProductDTO]:
        return [
            ProductDTO(
                id=p.id,
                title=p.title,
                price_current=f"{p.price_current.amount:.2f}",
                price_base=f"{p.price_base.amount:.2f}",
                currency=p.price_current.currency,
                cover_image=p.primary_image,
                total_stock=p.total_stock,
                variants=[
                    VariantStockDTO(
                        name=display_name(v.name, self._locales),
                        image=v.primary_image or "",
                        stock=v.stock,
                    )
                    for v in p.variants
                ],
            )
            for p in self._product_repo.list_all()
        ]
