"""Application services: Order queries (read-only).

Orders are returned with the display fields of their products joined in
(title, cover image, embroidery category).
"""

from __future__ import annotations

from boutique.application.dto import OrderDTO, order_to_dto
from boutique.domain.exceptions import EntityNotFoundError, ValidationError
from boutique.domain.model.order import Order
from boutique.domain.model.product import Product
from boutique.domain.repository.order_repository import OrderRepository
from boutique.domain.repository.product_repository import ProductRepository


def _products_for(
    product_repo: ProductRepository, orders: list[Order]
) -> dict[str, Product | None]:
    ids = {line.product_id for order in orders for line in order.lines}
    return {product_id: product_repo.get_by_id(product_id) for product_id in ids}


class ShowOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo

    def handle(self, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        return order_to_dto(order, _products_for(self._product_repo, [order]))


class ListCustomerOrdersHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo

    def handle(self, email: str) -> list[OrderDTO]:
        """Orders placed with *email*, oldest first."""
        if not email or not email.strip():
            raise ValidationError("Email is required")
        orders = sorted(
            self._order_repo.list_by_email(email.strip()),
            key=lambda o: o.created_at,
        )
        products = _products_for(self._product_repo, orders)
        return [order_to_dto(order, products) for order in orders]


class ListOrdersHandler:
    """Admin view of every order.

    Lines whose product has left the catalog are hidden, and every line
    carries a cover image (the default asset when the product has none).
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo

    def handle(self) -> list[OrderDTO]:
        orders = self._order_repo.list_all()
        products = _products_for(self._product_repo, orders)
        return [
            order_to_dto(order, products, hide_orphan_lines=True) for order in orders
        ]
