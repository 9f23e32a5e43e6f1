"""JSON-file-backed implementation of ProductRepository.

Saves are version-checked: a product loaded before someone else saved it
is rejected with ConcurrencyError instead of overwriting their change.
"""

from __future__ import annotations

import json
import os
import threading
from decimal import Decimal
from pathlib import Path

from boutique.domain.exceptions import ConcurrencyError
from boutique.domain.model.product import Product, ProductVariant
from boutique.domain.model.value_objects import DEFAULT_CURRENCY, Money
from boutique.domain.model.variant import LocalizedName, VariantName, variant_name_from_raw
from boutique.domain.repository.product_repository import ProductRepository


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        self._ensure_file()

    # --- ProductRepository interface ------------------------------------------

    def get_by_id(self, product_id: str) -> Product | None:
        for raw in self._read():
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._read()]

    def save(self, product: Product) -> None:
        with self._lock:
            records = self._load_raw()
            new_version = product.version + 1
            raw_new = self._to_raw(product, new_version)

            for i, raw in enumerate(records):
                if raw["id"] == product.id:
                    stored_version = raw.get("version", 0)
                    if stored_version != product.version:
                        raise ConcurrencyError(
                            f"Product '{product.id}' is at version {stored_version}, "
                            f"update was based on version {product.version}"
                        )
                    records[i] = raw_new
                    break
            else:
                records.append(raw_new)

            self._persist_raw(records)
            product.version = new_version

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _name_to_raw(name: VariantName) -> str | dict[str, str]:
        if isinstance(name, LocalizedName):
            return name.as_dict()
        return name.text

    @classmethod
    def _to_raw(cls, product: Product, version: int) -> dict:
        return {
            "id": product.id,
            "title": product.title,
            "cover_image": product.cover_image,
            "embroidery_category": product.embroidery_category,
            "price_current": str(product.price_current.amount),
            "price_base": str(product.price_base.amount),
            "currency": product.price_current.currency,
            "variants": [
                {
                    "id": v.id,
                    "name": cls._name_to_raw(v.name),
                    "images": list(v.images),
                    "stock": v.stock,
                }
                for v in product.variants
            ],
            "total_stock": product.total_stock,
            "version": version,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        currency = raw.get("currency", DEFAULT_CURRENCY)
        return Product(
            id=raw["id"],
            title=raw["title"],
            price_current=Money(Decimal(raw["price_current"]), currency),
            price_base=Money(Decimal(raw.get("price_base", raw["price_current"])), currency),
            variants=[
                ProductVariant(
                    name=variant_name_from_raw(v.get("name")),
                    images=tuple(v.get("images", [])),
                    stock=v.get("stock", 0),
                    id=v.get("id"),
                )
                for v in raw.get("variants", [])
            ],
            cover_image=raw.get("cover_image", ""),
            embroidery_category=raw.get("embroidery_category"),
            total_stock=raw.get("total_stock", 0),
            version=raw.get("version", 0),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _read(self) -> list[dict]:
        with self._lock:
            return self._load_raw()

    def _persist_raw(self, records: list[dict]) -> None:
        # Readers must never see a truncated file.
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        tmp_path.write_text(
            json.dumps(records, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
