"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

import json
import os
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from boutique.domain.model.order import (
    CustomerContact,
    Order,
    OrderLine,
    OrderStatus,
    ShippingAddress,
    VariantSnapshot,
)
from boutique.domain.model.value_objects import DEFAULT_CURRENCY, Money, Quantity
from boutique.domain.repository.order_repository import OrderRepository


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock = threading.Lock()
        self._ensure_file()

    # --- OrderRepository interface --------------------------------------------

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._read():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._read()]

    def list_by_email(self, email: str) -> list[Order]:
        orders = [
            self._to_domain(raw)
            for raw in self._read()
            if raw["customer"]["email"] == email
        ]
        return sorted(orders, key=lambda o: o.created_at)

    def save(self, order: Order) -> None:
        with self._lock:
            orders = self._load_raw()

            if order.id is None:
                order.id = max((o["id"] for o in orders), default=0) + 1

            # Upsert: replace if exists, otherwise append
            replaced = False
            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    orders[i] = self._to_raw(order)
                    replaced = True
                    break
            if not replaced:
                orders.append(self._to_raw(order))

            self._persist_raw(orders)

    def delete(self, order_id: int) -> bool:
        with self._lock:
            orders = self._load_raw()
            kept = [raw for raw in orders if raw["id"] != order_id]
            if len(kept) == len(orders):
                return False
            self._persist_raw(kept)
            return True

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        return {
            "id": order.id,
            "customer": {
                "name": order.customer.name,
                "email": order.customer.email,
                "phone": order.customer.phone,
            },
            "address": {
                "street": order.address.street,
                "city": order.address.city,
                "state": order.address.state,
                "country": order.address.country,
                "zipcode": order.address.zipcode,
            },
            "status": order.status.value,
            "is_paid": order.is_paid,
            "is_delivered": order.is_delivered,
            "line_progress": order.line_progress,
            "total_price": str(order.total_price.amount),
            "currency": order.total_price.currency,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
            "lines": [
                {
                    "product_id": line.product_id,
                    "quantity": line.quantity.value,
                    "unit_price": str(line.unit_price.amount),
                    "variant": {
                        "name": line.variant.name,
                        "image": line.variant.image,
                        "id": line.variant.variant_id,
                        "fallback_image": line.variant.fallback_image,
                    },
                }
                for line in order.lines
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        currency = raw.get("currency", DEFAULT_CURRENCY)
        lines = [
            OrderLine(
                product_id=item["product_id"],
                quantity=Quantity(item["quantity"]),
                unit_price=Money(Decimal(item["unit_price"]), currency),
                variant=VariantSnapshot(
                    name=item["variant"]["name"],
                    image=item["variant"]["image"],
                    variant_id=item["variant"].get("id"),
                    fallback_image=item["variant"].get("fallback_image", False),
                ),
            )
            for item in raw["lines"]
        ]
        return Order(
            id=raw["id"],
            customer=CustomerContact(**raw["customer"]),
            address=ShippingAddress(**raw["address"]),
            lines=lines,
            total_price=Money(Decimal(raw["total_price"]), currency),
            status=OrderStatus(raw["status"]),
            is_paid=raw.get("is_paid", False),
            is_delivered=raw.get("is_delivered", False),
            line_progress=dict(raw.get("line_progress", {})),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw.get("updated_at", raw["created_at"])),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def _read(self) -> list[dict]:
        with self._lock:
            return self._load_raw()

    def _persist_raw(self, orders: list[dict]) -> None:
        # Readers must never see a truncated file.
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        tmp_path.write_text(
            json.dumps(orders, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")
