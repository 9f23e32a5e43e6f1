"""Pydantic request schemas for the Orders API.

These are external contracts (anti-corruption layer), separate from the
application DTOs.  Field aliases accept the storefront's historical field
names (``products``, ``productId``, ``color.colorName``...).  Required
business fields are optional at this layer; the handlers validate them and
answer 400 with a domain message.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from boutique.application.dto import OrderLineSpec
from boutique.domain.model.order import CustomerContact, ShippingAddress
from boutique.domain.model.variant import VariantKey


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class VariantRequest(_Request):
    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "_id", "variantId"))
    image: str | None = None
    name: str | dict[str, str] | None = Field(
        default=None, validation_alias=AliasChoices("name", "colorName")
    )

    def to_key(self, locales: tuple[str, ...]) -> VariantKey:
        return VariantKey.from_raw(
            {"id": self.id, "image": self.image, "name": self.name}, locales
        )


class AddressRequest(_Request):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    zipcode: str | None = None


class OrderLineRequest(_Request):
    product_id: Any = Field(default=None, validation_alias=AliasChoices("productId", "product_id"))
    quantity: int | None = None
    variant: VariantRequest | None = Field(
        default=None, validation_alias=AliasChoices("variant", "color")
    )
    price: Any = None

    def to_spec(self, locales: tuple[str, ...]) -> OrderLineSpec:
        product_id = self.product_id
        if isinstance(product_id, dict):
            product_id = product_id.get("_id") or product_id.get("id")
        return OrderLineSpec(
            product_id=str(product_id or "").strip(),
            quantity=self.quantity if self.quantity is not None else 0,
            variant=self.variant.to_key(locales) if self.variant else VariantKey(),
            client_price=str(self.price) if self.price is not None else None,
        )


class CreateOrderRequest(_Request):
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: AddressRequest | None = None
    # Flat address fields, as older storefront builds send them.
    street: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    zipcode: str | None = None
    lines: list[OrderLineRequest] = Field(
        default_factory=list, validation_alias=AliasChoices("lines", "products")
    )

    def customer(self) -> CustomerContact:
        return CustomerContact(
            name=self.name or "", email=self.email or "", phone=self.phone or ""
        )

    def shipping_address(self) -> ShippingAddress:
        nested = self.address or AddressRequest()
        return ShippingAddress(
            street=nested.street or self.street or "",
            city=nested.city or self.city or "",
            state=nested.state or self.state or "",
            country=nested.country or self.country or "",
            zipcode=nested.zipcode or self.zipcode or "",
        )


class UpdateOrderRequest(_Request):
    is_paid: bool | None = Field(default=None, validation_alias=AliasChoices("isPaid", "is_paid"))
    is_delivered: bool | None = Field(
        default=None, validation_alias=AliasChoices("isDelivered", "is_delivered")
    )
    line_progress: dict[str, int] | None = Field(
        default=None,
        validation_alias=AliasChoices("lineProgress", "productProgress", "line_progress"),
    )


class RemoveLineRequest(_Request):
    order_id: int = Field(validation_alias=AliasChoices("orderId", "order_id"))
    product_key: str | None = Field(
        default=None, validation_alias=AliasChoices("productKey", "lineKey", "product_key")
    )
    product_id: str | None = Field(
        default=None, validation_alias=AliasChoices("productId", "product_id")
    )
    variant: VariantRequest | None = Field(
        default=None, validation_alias=AliasChoices("variant", "color")
    )
    quantity: int | None = Field(
        default=None, validation_alias=AliasChoices("quantityToRemove", "quantity")
    )


class NotifyRequest(_Request):
    order_id: int = Field(validation_alias=AliasChoices("orderId", "order_id"))
    email: str | None = None
    product_key: str | None = Field(
        default=None, validation_alias=AliasChoices("productKey", "lineKey", "product_key")
    )
    progress: int | None = None
    article_index: int | None = Field(
        default=None, validation_alias=AliasChoices("articleIndex", "article_index")
    )
