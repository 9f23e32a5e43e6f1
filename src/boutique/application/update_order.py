"""Application service: Update Order use case.

Payment/delivery flags and per-line progress.  No stock effect.
"""

from __future__ import annotations

from boutique.application.dto import OrderDTO
from boutique.application.show_order import ShowOrderHandler
from boutique.domain.exceptions import EntityNotFoundError
from boutique.domain.repository.order_repository import OrderRepository
from boutique.domain.repository.product_repository import ProductRepository


class UpdateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo

    def handle(
        self,
        order_id: int,
        is_paid: bool | None = None,
        is_delivered: bool | None = None,
        line_progress: dict[str, int] | None = None,
    ) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        order.update_flags(
            is_paid=is_paid,
            is_delivered=is_delivered,
            line_progress=line_progress,
        )
        self._order_repo.save(order)
        return ShowOrderHandler(self._order_repo, self._product_repo).handle(order_id)
