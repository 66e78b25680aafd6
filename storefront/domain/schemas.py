# storefront/domain/schemas.py
from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field

from storefront.domain.models import (
    AddOn,
    CartLineItem,
    CheckoutStep,
    DeliverySelection,
    DeliveryType,
    PaymentMethod,
    PaymentSelection,
)


class ItemIn(BaseModel):
    """Schema para adicionar produto ao carrinho."""

    id: str = Field(..., min_length=1, description="Chave do produto")
    name: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    observations: str | None = None
    addons: List[AddOn] = Field(default_factory=list)


class QuantityIn(BaseModel):
    quantity: int


class CartOut(BaseModel):
    items: List[CartLineItem]
    total_items: int
    total_price: Decimal


class LoginIn(BaseModel):
    contact: str = Field(..., min_length=1)
    password: str


class AddressIn(BaseModel):
    """Campos chegam crus do formulario; a validacao fica no DeliveryFeeCalculator."""

    cep: str = ""
    street: str = ""
    number: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    complement: str | None = None
    reference: str | None = None


class DeliveryIn(BaseModel):
    type: DeliveryType
    address: AddressIn | None = None
    use_saved_address: bool = False


class PaymentIn(BaseModel):
    method: PaymentMethod | None = None
    needs_change: bool = False
    tendered: str | None = None
    installments: int | None = None


class ObservationsIn(BaseModel):
    observations: str | None = Field(default=None, max_length=200)


class CheckoutOut(BaseModel):
    step: CheckoutStep
    delivery: DeliverySelection | None = None
    payment: PaymentSelection | None = None
    observations: str | None = None
    error: str | None = None
    order_id: str | None = None
    subtotal: Decimal
    total: Decimal


class OrderOut(BaseModel):
    order_id: str
    url: str
    text: str
    total: Decimal
    estimated_time: str
    follow_up_url: str
