"""FastAPI routes for the Orders API.

Each route translates its request body into handler arguments and returns
the handler's DTO.  Domain exceptions are mapped to status codes by the
handlers registered in ``app.py``.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Request

from boutique.domain.exceptions import EntityNotFoundError, ValidationError
from boutique.domain.model.order import parse_line_key
from boutique.domain.model.variant import VariantKey
from boutique.infrastructure.api.auth import require_admin
from boutique.infrastructure.api.schemas import (
    CreateOrderRequest,
    NotifyRequest,
    RemoveLineRequest,
    UpdateOrderRequest,
)
from boutique.infrastructure.bootstrap import Services

router = APIRouter(prefix="/orders", tags=["orders"])


def get_services(request: Request) -> Services:
    return request.app.state.services


def order_id_path(order_id: str) -> int:
    # Order ids are integers; anything else names no order.
    try:
        return int(order_id)
    except ValueError:
        raise EntityNotFoundError(f"Order #{order_id} not found") from None


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------
@router.post("", status_code=201, dependencies=[Depends(require_admin)])
def create_order(
    body: CreateOrderRequest, services: Services = Depends(get_services)
) -> dict:
    locales = services.settings.locales
    dto = services.create_order().handle(
        customer=body.customer(),
        address=body.shipping_address(),
        line_specs=[line.to_spec(locales) for line in body.lines],
    )
    return asdict(dto)


@router.get("", dependencies=[Depends(require_admin)])
def list_orders(services: Services = Depends(get_services)) -> list[dict]:
    return [asdict(dto) for dto in services.list_orders().handle()]


@router.get("/email/{email}")
def list_customer_orders(
    email: str, services: Services = Depends(get_services)
) -> list[dict]:
    return [asdict(dto) for dto in services.list_customer_orders().handle(email)]


# ---------------------------------------------------------------------------
# Line operations (declared before /{order_id})
# ---------------------------------------------------------------------------
@router.patch("/remove-line")
def remove_order_line(
    body: RemoveLineRequest, services: Services = Depends(get_services)
) -> dict:
    if body.product_key:
        product_id, key = parse_line_key(body.product_key)
    else:
        product_id = (body.product_id or "").strip()
        key = (
            body.variant.to_key(services.settings.locales)
            if body.variant
            else VariantKey()
        )
    if not product_id:
        raise ValidationError("A line key or a product id is required")

    result = services.remove_order_line().handle(
        order_id=body.order_id,
        product_id=product_id,
        key=key,
        quantity=body.quantity,  # type: ignore[arg-type]
    )
    return asdict(result)


@router.post("/notify")
def notify_order(
    body: NotifyRequest, services: Services = Depends(get_services)
) -> dict:
    result = services.notify_order().handle(
        order_id=body.order_id,
        email=body.email,
        line_key=body.product_key,
        progress=body.progress,
        article_index=body.article_index,
    )
    return asdict(result)


# ---------------------------------------------------------------------------
# Single order
# ---------------------------------------------------------------------------
@router.get("/{order_id}")
def show_order(
    order_id: int = Depends(order_id_path), services: Services = Depends(get_services)
) -> dict:
    return asdict(services.show_order().handle(order_id))


@router.patch("/{order_id}", dependencies=[Depends(require_admin)])
def update_order(
    body: UpdateOrderRequest,
    order_id: int = Depends(order_id_path),
    services: Services = Depends(get_services),
) -> dict:
    dto = services.update_order().handle(
        order_id,
        is_paid=body.is_paid,
        is_delivered=body.is_delivered,
        line_progress=body.line_progress,
    )
    return asdict(dto)


@router.delete("/{order_id}", dependencies=[Depends(require_admin)])
def delete_order(
    order_id: int = Depends(order_id_path), services: Services = Depends(get_services)
) -> dict:
    services.delete_order().handle(order_id)
    return {"message": "Order deleted", "order_id": order_id}
