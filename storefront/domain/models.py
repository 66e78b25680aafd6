# storefront/domain/models.py
"""
Tipos do nucleo de checkout.

Modelos pydantic usados em todo o fluxo: itens do carrinho (persistidos como JSON),
selecoes de entrega/pagamento, sessao de checkout e a mensagem final do pedido.
"""
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from storefront.utils.money import ZERO, to_money


def _as_money(v):
    try:
        value = to_money(v)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"invalid amount: {v!r}") from e
    if not value.is_finite():
        raise ValueError(f"invalid amount: {v!r}")
    return value


class CheckoutStep(str, Enum):
    AUTH = "auth"
    DELIVERY = "delivery"
    PAYMENT = "payment"
    SUMMARY = "summary"
    SUCCESS = "success"

    def following(self) -> "CheckoutStep | None":
        idx = STEP_ORDER.index(self)
        return STEP_ORDER[idx + 1] if idx + 1 < len(STEP_ORDER) else None

    def preceding(self) -> "CheckoutStep | None":
        idx = STEP_ORDER.index(self)
        return STEP_ORDER[idx - 1] if idx > 0 else None


STEP_ORDER = (
    CheckoutStep.AUTH,
    CheckoutStep.DELIVERY,
    CheckoutStep.PAYMENT,
    CheckoutStep.SUMMARY,
    CheckoutStep.SUCCESS,
)


class DeliveryType(str, Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class PaymentMethod(str, Enum):
    CASH = "cash"
    DEBIT = "debit"
    CREDIT = "credit"
    PIX = "pix"


PAYMENT_LABELS = {
    PaymentMethod.CASH: "Dinheiro",
    PaymentMethod.DEBIT: "Cartão de Débito",
    PaymentMethod.CREDIT: "Cartão de Crédito",
    PaymentMethod.PIX: "PIX",
}


# =====================================================
# CARRINHO
# =====================================================
class AddOn(BaseModel):
    name: str
    price: Decimal = Field(default=ZERO, ge=0)

    @field_validator("price", mode="before")
    @classmethod
    def _money(cls, v):
        return _as_money(v)


class CartLineItem(BaseModel):
    """Item do carrinho. `id` e a chave de identidade usada no merge."""

    id: str
    name: str
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(default=1, ge=1)
    observations: str | None = None
    addons: list[AddOn] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _key_as_str(cls, v):
        return str(v)

    @field_validator("price", mode="before")
    @classmethod
    def _money(cls, v):
        return _as_money(v)

    @property
    def line_total(self) -> Decimal:
        # adicionais nao entram no total da linha
        return to_money(self.price * self.quantity)


# =====================================================
# ENTREGA
# =====================================================
class Address(BaseModel):
    cep: str
    street: str
    number: str
    neighborhood: str
    city: str
    state: str
    complement: str | None = None
    reference: str | None = None

    @property
    def formatted_cep(self) -> str:
        return f"{self.cep[:5]}-{self.cep[5:]}"


class DeliverySelection(BaseModel):
    type: DeliveryType
    address: Address | None = None
    fee: Decimal = Field(default=ZERO, ge=0)
    estimated_time: str

    @model_validator(mode="after")
    def _address_iff_delivery(self):
        if self.type == DeliveryType.DELIVERY and self.address is None:
            raise ValueError("delivery selection requires an address")
        if self.type == DeliveryType.PICKUP:
            if self.address is not None:
                raise ValueError("pickup selection must not carry an address")
            if self.fee != ZERO:
                raise ValueError("pickup fee must be zero")
        return self


class DeliveryQuote(BaseModel):
    """Resultado do calculo de entrega: selecao valida ou erros por campo."""

    selection: DeliverySelection | None = None
    errors: dict[str, str] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.selection is not None and not self.errors


# =====================================================
# PAGAMENTO
# =====================================================
class CashDetail(BaseModel):
    kind: Literal["cash"] = "cash"
    needs_change: bool = False
    tendered_amount: Decimal
    change: Decimal = ZERO


class CreditDetail(BaseModel):
    kind: Literal["credit"] = "credit"
    installments: int = Field(..., ge=1)
    installment_amount: Decimal
    # ultima parcela absorve a diferenca de arredondamento
    installment_amounts: list[Decimal]


class AmountDetail(BaseModel):
    kind: Literal["amount"] = "amount"
    total_amount: Decimal


PaymentDetail = Union[CashDetail, CreditDetail, AmountDetail]


class PaymentSelection(BaseModel):
    method: PaymentMethod
    detail: PaymentDetail = Field(..., discriminator="kind")

    @property
    def label(self) -> str:
        return PAYMENT_LABELS[self.method]

    @property
    def covered_total(self) -> Decimal:
        """Total do pedido sobre o qual troco/parcelas foram calculados."""
        detail = self.detail
        if isinstance(detail, CashDetail):
            return to_money(detail.tendered_amount - detail.change)
        if isinstance(detail, CreditDetail):
            return to_money(sum(detail.installment_amounts, ZERO))
        return to_money(detail.total_amount)


class PaymentOutcome(BaseModel):
    selection: PaymentSelection | None = None
    error: str | None = None  # codigo: InsufficientTender, MissingTender, ...
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.selection is not None and self.error is None


# =====================================================
# CLIENTE / SESSAO / MENSAGEM
# =====================================================
class Customer(BaseModel):
    name: str
    contact: str
    addresses: list[Address] = Field(default_factory=list)


class CheckoutSession(BaseModel):
    step: CheckoutStep = CheckoutStep.AUTH
    delivery: DeliverySelection | None = None
    payment: PaymentSelection | None = None
    observations: str | None = None
    error: str | None = None
    order_id: str | None = None


class OrderMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    encoded_text: str
    url: str
