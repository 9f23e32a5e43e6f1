"""Integration tests for the stock synchronizer and reconciliation."""

import json

from boutique.application.reconcile_stock import (
    ReconcileStockHandler,
    ShowUnappliedAdjustmentsHandler,
)
from boutique.application.stock_sync import StockDelta, StockSynchronizer
from boutique.domain.model.product import Product, ProductVariant
from boutique.domain.model.stock_adjustment import AdjustmentReason, AdjustmentStatus
from boutique.domain.model.value_objects import Money
from boutique.domain.model.variant import PlainName, VariantKey
from boutique.domain.service.stock_ledger import StockLedger
from tests.fakes import FakeProductRepository, FakeStockAdjustmentRepository

RED = VariantKey(name="Red")


def _product(stock: int = 5) -> Product:
    return Product.create(
        id="P1",
        title="Kaftan",
        price_current=Money.of("10.00"),
        price_base=Money.of("10.00"),
        variants=[ProductVariant(name=PlainName("Red"), images=("/red.png",), stock=stock)],
    )


def _setup(products: list[Product] | None = None):
    product_repo = FakeProductRepository([_product()] if products is None else products)
    adjustments = FakeStockAdjustmentRepository()
    return StockSynchronizer(StockLedger(product_repo), adjustments), product_repo, adjustments


class FailingAdjustmentRepository(FakeStockAdjustmentRepository):

    def save(self, adjustment):
        raise OSError("disk full")


class UnreadableProductRepository(FakeProductRepository):

    def get_by_id(self, product_id):
        raise json.JSONDecodeError("Expecting value", "", 0)


class TestSubmit:

    def test_records_and_applies(self):
        sync, product_repo, adjustments = _setup()
        (adjustment,) = sync.submit(1, AdjustmentReason.ORDER_CREATED, [StockDelta("P1", RED, -2)])

        assert adjustment.status == AdjustmentStatus.APPLIED
        assert adjustment.attempts == 1
        assert adjustments.get_by_id(adjustment.id).status == AdjustmentStatus.APPLIED
        assert product_repo.get_by_id("P1").variants[0].stock == 3

    def test_failure_is_recorded_not_raised(self):
        sync, _, adjustments = _setup(products=[])
        (adjustment,) = sync.submit(1, AdjustmentReason.ORDER_DELETED, [StockDelta("P1", RED, 2)])

        stored = adjustments.get_by_id(adjustment.id)
        assert stored.status == AdjustmentStatus.FAILED
        assert stored.attempts == 1
        assert "P1" in stored.last_error

    def test_each_delta_applied_independently(self):
        sync, product_repo, _ = _setup()
        applied = sync.submit(
            1,
            AdjustmentReason.ORDER_DELETED,
            [StockDelta("GONE", RED, 1), StockDelta("P1", RED, 1)],
        )
        assert [a.status for a in applied] == [AdjustmentStatus.FAILED, AdjustmentStatus.APPLIED]
        assert product_repo.get_by_id("P1").variants[0].stock == 6

    def test_outbox_write_failure_does_not_raise(self):
        product_repo = FakeProductRepository([_product()])
        sync = StockSynchronizer(StockLedger(product_repo), FailingAdjustmentRepository())
        sync.submit(1, AdjustmentReason.ORDER_CREATED, [StockDelta("P1", RED, -1)])
        assert product_repo.get_by_id("P1").variants[0].stock == 4

    def test_unreadable_catalog_is_recorded_not_raised(self):
        adjustments = FakeStockAdjustmentRepository()
        sync = StockSynchronizer(StockLedger(UnreadableProductRepository()), adjustments)
        (adjustment,) = sync.submit(
            1, AdjustmentReason.ORDER_CREATED, [StockDelta("P1", RED, -1)]
        )

        stored = adjustments.get_by_id(adjustment.id)
        assert stored.status == AdjustmentStatus.FAILED
        assert "Expecting value" in stored.last_error


class TestReconcile:

    def test_applies_once_catalog_is_fixed(self):
        sync, product_repo, adjustments = _setup(products=[])
        sync.submit(1, AdjustmentReason.LINE_REMOVED, [StockDelta("P1", RED, 2)])

        product_repo.save(_product(stock=0))
        report = ReconcileStockHandler(sync, max_attempts=5).handle()

        assert (report.applied, report.failed, report.skipped) == (1, 0, 0)
        assert adjustments.list_unapplied() == []
        assert product_repo.get_by_id("P1").variants[0].stock == 2

    def test_still_failing(self):
        sync, _, adjustments = _setup(products=[])
        sync.submit(1, AdjustmentReason.LINE_REMOVED, [StockDelta("P1", RED, 2)])

        report = ReconcileStockHandler(sync, max_attempts=5).handle()

        assert (report.applied, report.failed, report.skipped) == (0, 1, 0)
        (adjustment,) = adjustments.list_unapplied()
        assert adjustment.attempts == 2

    def test_skips_exhausted_adjustments(self):
        sync, _, _ = _setup(products=[])
        sync.submit(1, AdjustmentReason.LINE_REMOVED, [StockDelta("P1", RED, 2)])

        report = ReconcileStockHandler(sync, max_attempts=1).handle()

        assert (report.applied, report.failed, report.skipped) == (0, 0, 1)

    def test_show_unapplied(self):
        sync, _, adjustments = _setup(products=[])
        sync.submit(7, AdjustmentReason.ORDER_DELETED, [StockDelta("P1", RED, 3)])

        (dto,) = ShowUnappliedAdjustmentsHandler(adjustments).handle()

        assert dto.order_id == 7
        assert dto.product_id == "P1"
        assert dto.variant == "Red"
        assert dto.delta == 3
        assert dto.reason == "order-deleted"
        assert dto.status == "failed"
        assert dto.last_error
