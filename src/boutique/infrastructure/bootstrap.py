"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every repository, the ledger, the stock synchronizer and the mailer are
built once here and handed to the handlers that need them.
"""

from __future__ import annotations

from dataclasses import dataclass

from boutique.application.add_product import AddProductHandler
from boutique.application.create_order import CreateOrderHandler
from boutique.application.delete_order import DeleteOrderHandler
from boutique.application.list_products import ListProductsHandler
from boutique.application.mailer import Mailer
from boutique.application.notify_order import NotifyOrderProgressHandler
from boutique.application.reconcile_stock import (
    ReconcileStockHandler,
    ShowUnappliedAdjustmentsHandler,
)
from boutique.application.remove_order_line import RemoveOrderLineHandler
from boutique.application.show_order import (
    ListCustomerOrdersHandler,
    ListOrdersHandler,
    ShowOrderHandler,
)
from boutique.application.stock_sync import StockSynchronizer
from boutique.application.update_order import UpdateOrderHandler
from boutique.domain.repository.order_repository import OrderRepository
from boutique.domain.repository.product_repository import ProductRepository
from boutique.domain.repository.stock_adjustment_repository import (
    StockAdjustmentRepository,
)
from boutique.domain.service.stock_ledger import StockLedger
from boutique.infrastructure.config import Settings
from boutique.infrastructure.mail.log_mailer import LogMailer
from boutique.infrastructure.mail.smtp_mailer import SmtpMailer
from boutique.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from boutique.infrastructure.persistence.json_product_repository import (
    JsonProductRepository,
)
from boutique.infrastructure.persistence.json_stock_adjustment_repository import (
    JsonStockAdjustmentRepository,
)


@dataclass
class Services:
    settings: Settings
    products: ProductRepository
    orders: OrderRepository
    adjustments: StockAdjustmentRepository
    ledger: StockLedger
    stock_sync: StockSynchronizer
    mailer: Mailer

    # --- Handlers -------------------------------------------------------------

    def create_order(self) -> CreateOrderHandler:
        return CreateOrderHandler(
            self.orders, self.products, self.stock_sync, locales=self.settings.locales
        )

    def show_order(self) -> ShowOrderHandler:
        return ShowOrderHandler(self.orders, self.products)

    def list_orders(self) -> ListOrdersHandler:
        return ListOrdersHandler(self.orders, self.products)

    def list_customer_orders(self) -> ListCustomerOrdersHandler:
        return ListCustomerOrdersHandler(self.orders, self.products)

    def update_order(self) -> UpdateOrderHandler:
        return UpdateOrderHandler(self.orders, self.products)

    def remove_order_line(self) -> RemoveOrderLineHandler:
        return RemoveOrderLineHandler(
            self.orders,
            self.products,
            self.stock_sync,
            repricing=self.settings.repricing_policy,
        )

    def delete_order(self) -> DeleteOrderHandler:
        return DeleteOrderHandler(self.orders, self.stock_sync)

    def notify_order(self) -> NotifyOrderProgressHandler:
        return NotifyOrderProgressHandler(
            self.orders, self.products, self.mailer, store_name=self.settings.store_name
        )

    def add_product(self) -> AddProductHandler:
        return AddProductHandler(self.products, currency=self.settings.currency)

    def list_products(self) -> ListProductsHandler:
        return ListProductsHandler(self.products, locales=self.settings.locales)

    def show_unapplied_adjustments(self) -> ShowUnappliedAdjustmentsHandler:
        return ShowUnappliedAdjustmentsHandler(self.adjustments)

    def reconcile_stock(self) -> ReconcileStockHandler:
        return ReconcileStockHandler(
            self.stock_sync, max_attempts=self.settings.reconcile_max_attempts
        )


def build_mailer(settings: Settings) -> Mailer:
    if not settings.smtp_host:
        return LogMailer()
    return SmtpMailer(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_password,
        sender=settings.mail_from,
    )


def build_services(settings: Settings | None = None) -> Services:
    settings = settings or Settings.from_env()
    data_dir = settings.data_dir

    products = JsonProductRepository(data_dir / "products.json")
    orders = JsonOrderRepository(data_dir / "orders.json")
    adjustments = JsonStockAdjustmentRepository(data_dir / "stock_adjustments.json")
    ledger = StockLedger(products, max_attempts=settings.ledger_max_attempts)

    return Services(
        settings=settings,
        products=products,
        orders=orders,
        adjustments=adjustments,
        ledger=ledger,
        stock_sync=StockSynchronizer(ledger, adjustments),
        mailer=build_mailer(settings),
    )
