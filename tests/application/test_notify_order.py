"""Integration tests for the NotifyOrderProgress use case."""

import pytest

from boutique.application.notify_order import NotifyOrderProgressHandler
from boutique.domain.exceptions import EntityNotFoundError, ValidationError
from boutique.domain.model.order import (
    CustomerContact,
    Order,
    OrderLine,
    ShippingAddress,
    VariantSnapshot,
)
from boutique.domain.model.product import Product, ProductVariant
from boutique.domain.model.value_objects import Money, Quantity
from boutique.domain.model.variant import PlainName
from tests.fakes import FakeMailer, FakeOrderRepository, FakeProductRepository


def _setup(
    customer_name: str = "Amira",
    mailer: FakeMailer | None = None,
) -> tuple[NotifyOrderProgressHandler, FakeMailer]:
    order_repo = FakeOrderRepository()
    order_repo.save(
        Order.create(
            CustomerContact(name=customer_name, email="amira@example.com", phone="1"),
            ShippingAddress(street="s", city="Tunis", state="Tunis", country="TN", zipcode="1000"),
            [
                OrderLine(
                    product_id="P1",
                    quantity=Quantity(1),
                    unit_price=Money.of("10.00"),
                    variant=VariantSnapshot(name="Red", image="/red.png"),
                )
            ],
        )
    )
    product_repo = FakeProductRepository(
        [
            Product.create(
                id="P1",
                title="Kaftan",
                price_current=Money.of("10.00"),
                price_base=Money.of("10.00"),
                variants=[ProductVariant(name=PlainName("Red"), images=("/red.png",), stock=1)],
            )
        ]
    )
    mailer = mailer or FakeMailer()
    handler = NotifyOrderProgressHandler(order_repo, product_repo, mailer, store_name="Wahret Zmen")
    return handler, mailer


class TestNotifyOrderProgress:

    def test_progress_update(self):
        handler, mailer = _setup()
        result = handler.handle(1, "amira@example.com", "P1|Red", 40)

        assert result.sent
        assert result.message_id == "fake-1"
        assert result.subject == "Order 1 - progress update (40%)"
        (message,) = mailer.sent
        assert message["to"] == "amira@example.com"
        assert "Kaftan (color: Red) is 40% ready" in message["body"]
        assert "Wahret Zmen" in message["body"]
        assert "<strong>40%</strong>" in message["html_body"]

    def test_ready_for_delivery_at_100(self):
        handler, mailer = _setup()
        result = handler.handle(1, "amira@example.com", "P1|Red", 100)
        assert result.subject == "Order 1 - ready for delivery"
        assert "ready for delivery" in mailer.sent[0]["body"]

    def test_article_index_in_subject(self):
        handler, _ = _setup()
        result = handler.handle(1, "amira@example.com", "P1|Red", 20, article_index=2)
        assert result.subject == "Order 1 (item #2) - progress update (20%)"

    def test_html_is_escaped(self):
        handler, mailer = _setup(customer_name="<b>Amira</b>")
        handler.handle(1, "amira@example.com", "P1|Red", 10)
        html = mailer.sent[0]["html_body"]
        assert "<b>Amira</b>" not in html
        assert "&lt;b&gt;Amira&lt;/b&gt;" in html

    def test_delivery_failure_is_reported_not_raised(self):
        handler, _ = _setup(mailer=FakeMailer(fail_with="connection refused"))
        result = handler.handle(1, "amira@example.com", "P1|Red", 10)
        assert not result.sent
        assert result.error == "connection refused"

    @pytest.mark.parametrize(
        "email, key, progress",
        [("", "P1|Red", 10), ("amira@example.com", "", 10), ("amira@example.com", "P1|Red", None)],
    )
    def test_required_fields(self, email, key, progress):
        handler, mailer = _setup()
        with pytest.raises(ValidationError, match="required"):
            handler.handle(1, email, key, progress)
        assert mailer.sent == []

    @pytest.mark.parametrize("progress", [-5, 101])
    def test_progress_out_of_range(self, progress):
        handler, _ = _setup()
        with pytest.raises(ValidationError, match="between 0 and 100"):
            handler.handle(1, "amira@example.com", "P1|Red", progress)

    def test_unknown_order(self):
        handler, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="#5"):
            handler.handle(5, "amira@example.com", "P1|Red", 10)

    def test_unknown_line(self):
        handler, mailer = _setup()
        with pytest.raises(EntityNotFoundError, match="No matching line"):
            handler.handle(1, "amira@example.com", "P1|Blue", 10)
        assert mailer.sent == []
