"""Integration tests for the RemoveOrderLine use case."""

import pytest

from boutique.application.create_order import CreateOrderHandler
from boutique.application.dto import OrderLineSpec
from boutique.application.remove_order_line import RemoveOrderLineHandler, RepricingPolicy
from boutique.application.stock_sync import StockSynchronizer
from boutique.domain.exceptions import EntityNotFoundError, InvalidQuantityError
from boutique.domain.model.order import CustomerContact, ShippingAddress
from boutique.domain.model.product import Product, ProductVariant
from boutique.domain.model.stock_adjustment import AdjustmentReason, AdjustmentStatus
from boutique.domain.model.value_objects import Money, Quantity
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
RED = VariantKey(name="Red")
BLUE = VariantKey(name="Blue")


def _setup(
    lines: list[OrderLineSpec],
    repricing: RepricingPolicy | None = None,
):
    """Place an order for *lines* and return the handler plus the fakes."""
    product = Product.create(
        id="P1",
        title="Kaftan",
        price_current=Money.of("10.00"),
        price_base=Money.of("10.00"),
        variants=[
            ProductVariant(name=PlainName("Red"), images=("/red.png",), stock=5),
            ProductVariant(name=PlainName("Blue"), images=("/blue.png",), stock=5),
        ],
    )
    order_repo = FakeOrderRepository()
    product_repo = FakeProductRepository([product])
    adjustments = FakeStockAdjustmentRepository()
    stock_sync = StockSynchronizer(StockLedger(product_repo), adjustments)

    dto = CreateOrderHandler(order_repo, product_repo, stock_sync).handle(
        CUSTOMER, ADDRESS, lines
    )
    if repricing is None:
        handler = RemoveOrderLineHandler(order_repo, product_repo, stock_sync)
    else:
        handler = RemoveOrderLineHandler(order_repo, product_repo, stock_sync, repricing)
    return handler, dto.id, order_repo, product_repo, adjustments


def _stock(product_repo: FakeProductRepository) -> list[int]:
    return [v.stock for v in product_repo.get_by_id("P1").variants]


class TestPartialRemoval:

    def test_reduces_line_and_restores_stock(self):
        handler, order_id, order_repo, product_repo, _ = _setup([OrderLineSpec("P1", 3, RED)])
        assert _stock(product_repo) == [2, 5]

        result = handler.handle(order_id, "P1", RED, 1)

        assert result.remaining_quantity == 2
        assert not result.order_deleted
        assert result.total_price == "20.00"
        order = order_repo.get_by_id(order_id)
        assert order.lines[0].quantity == Quantity(2)
        assert order.total_price == Money.of("20.00")
        assert _stock(product_repo) == [3, 5]

    def test_whole_line_removed_other_lines_kept(self):
        handler, order_id, order_repo, product_repo, _ = _setup(
            [OrderLineSpec("P1", 2, RED), OrderLineSpec("P1", 1, BLUE)]
        )
        result = handler.handle(order_id, "P1", RED, 2)

        assert result.remaining_quantity == 0
        assert not result.order_deleted
        order = order_repo.get_by_id(order_id)
        assert [line.key for line in order.lines] == ["P1|Blue"]
        assert order.total_price == Money.of("10.00")
        assert _stock(product_repo) == [5, 4]

    def test_records_line_removed_adjustment(self):
        handler, order_id, _, _, adjustments = _setup([OrderLineSpec("P1", 3, RED)])
        handler.handle(order_id, "P1", RED, 2)
        last = adjustments.list_all()[-1]
        assert last.reason == AdjustmentReason.LINE_REMOVED
        assert last.delta == 2
        assert last.status == AdjustmentStatus.APPLIED


class TestRemovalBounds:

    def test_removing_more_than_ordered_changes_nothing(self):
        handler, order_id, order_repo, product_repo, _ = _setup([OrderLineSpec("P1", 2, RED)])
        with pytest.raises(InvalidQuantityError, match="only has 2"):
            handler.handle(order_id, "P1", RED, 5)

        order = order_repo.get_by_id(order_id)
        assert order.lines[0].quantity == Quantity(2)
        assert order.total_price == Money.of("20.00")
        assert _stock(product_repo) == [3, 5]

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_rejected(self, quantity):
        handler, order_id, _, product_repo, _ = _setup([OrderLineSpec("P1", 2, RED)])
        with pytest.raises(InvalidQuantityError):
            handler.handle(order_id, "P1", RED, quantity)
        assert _stock(product_repo) == [3, 5]

    def test_quantity_checked_before_order_lookup(self):
        handler, _, _, _, _ = _setup([OrderLineSpec("P1", 2, RED)])
        with pytest.raises(InvalidQuantityError):
            handler.handle(999, "P1", RED, 0)

    def test_unknown_order(self):
        handler, _, _, _, _ = _setup([OrderLineSpec("P1", 2, RED)])
        with pytest.raises(EntityNotFoundError, match="#999"):
            handler.handle(999, "P1", RED, 1)

    def test_unknown_line(self):
        handler, order_id, order_repo, _, _ = _setup([OrderLineSpec("P1", 2, RED)])
        with pytest.raises(EntityNotFoundError, match="No matching line"):
            handler.handle(order_id, "P1", BLUE, 1)
        assert order_repo.get_by_id(order_id).lines[0].quantity == Quantity(2)


class TestFullRemovalCascade:

    def test_removing_last_unit_deletes_order(self):
        handler, order_id, order_repo, product_repo, _ = _setup([OrderLineSpec("P1", 2, RED)])
        assert _stock(product_repo) == [3, 5]

        result = handler.handle(order_id, "P1", RED, 2)

        assert result.order_deleted
        assert result.total_price is None
        assert order_repo.get_by_id(order_id) is None
        assert _stock(product_repo) == [5, 5]


class TestRepricing:

    def _raise_price(self, product_repo: FakeProductRepository) -> None:
        product = product_repo.get_by_id("P1")
        product.price_current = Money.of("15.00")
        product_repo.save(product)

    def test_snapshot_policy_keeps_order_prices(self):
        handler, order_id, order_repo, product_repo, _ = _setup(
            [OrderLineSpec("P1", 3, RED)], repricing=RepricingPolicy.SNAPSHOT
        )
        self._raise_price(product_repo)

        result = handler.handle(order_id, "P1", RED, 1)

        assert result.total_price == "20.00"
        assert order_repo.get_by_id(order_id).lines[0].unit_price == Money.of("10.00")

    def test_catalog_policy_uses_current_prices(self):
        handler, order_id, order_repo, product_repo, _ = _setup(
            [OrderLineSpec("P1", 3, RED)], repricing=RepricingPolicy.CATALOG
        )
        self._raise_price(product_repo)

        result = handler.handle(order_id, "P1", RED, 1)

        assert result.total_price == "30.00"
        order = order_repo.get_by_id(order_id)
        assert order.lines[0].unit_price == Money.of("15.00")
        assert order.total_price == Money.of("30.00")

    def test_catalog_policy_is_the_default(self):
        handler, order_id, _, product_repo, _ = _setup([OrderLineSpec("P1", 3, RED)])
        self._raise_price(product_repo)

        assert handler.handle(order_id, "P1", RED, 1).total_price == "30.00"

    def test_catalog_policy_keeps_price_of_missing_product(self):
        handler, order_id, order_repo, product_repo, _ = _setup(
            [OrderLineSpec("P1", 3, RED)], repricing=RepricingPolicy.CATALOG
        )
        product_repo.remove("P1")

        result = handler.handle(order_id, "P1", RED, 1)

        assert result.total_price == "20.00"


class TestRestoreFailures:

    def test_missing_product_does_not_block_removal(self):
        handler, order_id, order_repo, product_repo, adjustments = _setup(
            [OrderLineSpec("P1", 3, RED)]
        )
        product_repo.remove("P1")

        result = handler.handle(order_id, "P1", RED, 1)

        assert result.remaining_quantity == 2
        assert order_repo.get_by_id(order_id).lines[0].quantity == Quantity(2)
        (failed,) = adjustments.list_unapplied()
        assert failed.reason == AdjustmentReason.LINE_REMOVED
        assert failed.status == AdjustmentStatus.FAILED
