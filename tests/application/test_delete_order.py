"""Integration tests for the DeleteOrder use case."""

import pytest

from boutique.application.create_order import CreateOrderHandler
from boutique.application.delete_order import DeleteOrderHandler
from boutique.application.dto import OrderLineSpec
from boutique.application.stock_sync import StockSynchronizer
from boutique.domain.exceptions import EntityNotFoundError
from boutique.domain.model.order import CustomerContact, ShippingAddress
from boutique.domain.model.product import Product, ProductVariant
from boutique.domain.model.stock_adjustment import AdjustmentReason, AdjustmentStatus
from boutique.domain.model.value_objects import Money
from boutique.domain.model.variant import PlainName, VariantKey
from boutique.domain.service.stock_ledger import StockLedger
from tests.fakes import (
    FakeOrderRepository,
    FakeProductRepository,
    FakeStockAdjustmentRepository,
)

CUSTOMER = CustomerContact(name="Amira", email="amira@example.com", phone="+216 20 000 000")
ADDRESS = ShippingAddress(
    street="12 Rue de Marseille", city="Tunis", state="Tunis", country="Tunisia", zipcode="1000"
)


def _product(product_id: str, stock: int) -> Product:
    return Product.create(
        id=product_id,
        title=f"Product {product_id}",
        price_current=Money.of("10.00"),
        price_base=Money.of("10.00"),
        variants=[
            ProductVariant(name=PlainName("Red"), images=(f"/{product_id}-red.png",), stock=stock),
            ProductVariant(name=PlainName("Blue"), images=(f"/{product_id}-blue.png",), stock=stock),
        ],
    )


def _setup():
    order_repo = FakeOrderRepository()
    product_repo = FakeProductRepository([_product("P1", 5), _product("P2", 5)])
    adjustments = FakeStockAdjustmentRepository()
    stock_sync = StockSynchronizer(StockLedger(product_repo), adjustments)

    dto = CreateOrderHandler(order_repo, product_repo, stock_sync).handle(
        CUSTOMER,
        ADDRESS,
        [
            OrderLineSpec("P1", 2, VariantKey(name="Red")),
            OrderLineSpec("P1", 1, VariantKey(name="Blue")),
            OrderLineSpec("P2", 3, VariantKey(name="Blue")),
        ],
    )
    handler = DeleteOrderHandler(order_repo, stock_sync)
    return handler, dto.id, order_repo, product_repo, adjustments


def _stock(product_repo: FakeProductRepository, product_id: str) -> list[int]:
    return [v.stock for v in product_repo.get_by_id(product_id).variants]


class TestDeleteOrder:

    def test_deletes_and_restores_every_line(self):
        handler, order_id, order_repo, product_repo, _ = _setup()
        assert _stock(product_repo, "P1") == [3, 4]
        assert _stock(product_repo, "P2") == [5, 2]

        handler.handle(order_id)

        assert order_repo.get_by_id(order_id) is None
        assert _stock(product_repo, "P1") == [5, 5]
        assert _stock(product_repo, "P2") == [5, 5]
        assert product_repo.get_by_id("P1").total_stock == 10

    def test_records_order_deleted_adjustments(self):
        handler, order_id, _, _, adjustments = _setup()
        handler.handle(order_id)
        deleted = [
            a for a in adjustments.list_all() if a.reason == AdjustmentReason.ORDER_DELETED
        ]
        assert sorted(a.delta for a in deleted) == [1, 2, 3]
        assert all(a.status == AdjustmentStatus.APPLIED for a in deleted)

    def test_unknown_order(self):
        handler, _, _, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="#42"):
            handler.handle(42)

    def test_failing_line_does_not_stop_the_others(self):
        handler, order_id, order_repo, product_repo, adjustments = _setup()
        product_repo.remove("P1")

        handler.handle(order_id)

        assert order_repo.get_by_id(order_id) is None
        assert _stock(product_repo, "P2") == [5, 5]
        failed = adjustments.list_unapplied()
        assert len(failed) == 2
        assert {a.product_id for a in failed} == {"P1"}

    def test_restores_before_deleting(self, monkeypatch):
        handler, order_id, order_repo, _, adjustments = _setup()
        seen_at_delete = []
        original_delete = order_repo.delete

        def delete(oid):
            seen_at_delete.extend(
                a.status
                for a in adjustments.list_all()
                if a.reason == AdjustmentReason.ORDER_DELETED
            )
            return original_delete(oid)

        monkeypatch.setattr(order_repo, "delete", delete)
        handler.handle(order_id)

        assert seen_at_delete == [AdjustmentStatus.APPLIED] * 3
        assert order_repo.get_by_id(order_id) is None
