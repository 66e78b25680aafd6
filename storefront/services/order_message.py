# storefront/services/order_message.py
"""
Serializacao do pedido para o WhatsApp.

Funcao pura de (cliente, itens, entrega, pagamento, observacoes): mesmas entradas, mesmo texto.
O texto vai percent-encoded como parametro `text` do link https://wa.me/<destino>.
"""
from decimal import Decimal
from typing import Iterable
from urllib.parse import quote

from storefront.domain.errors import IncompleteOrderError
from storefront.domain.models import (
    CartLineItem,
    CashDetail,
    CreditDetail,
    Customer,
    DeliverySelection,
    DeliveryType,
    OrderMessage,
    PaymentSelection,
)
from storefront.utils.money import ZERO, format_brl, to_money
from storefront.utils.settings import MESSAGING_HOST, RESTAURANT_NAME, RESTAURANT_WHATSAPP

DIVIDER = "-----------------------------"

# mesmos caracteres que o encodeURIComponent do navegador deixa sem escape
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_uri_component(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


class OrderMessageSerializer:
    def __init__(
        self,
        store_name: str = RESTAURANT_NAME,
        destination: str = RESTAURANT_WHATSAPP,
        host: str = MESSAGING_HOST,
    ):
        self.store_name = store_name
        self.destination = destination
        self.host = host

    def render(
        self,
        customer: Customer | None,
        items: Iterable[CartLineItem],
        delivery: DeliverySelection | None,
        payment: PaymentSelection | None,
        observations: str | None = None,
    ) -> str:
        if delivery is None:
            raise IncompleteOrderError("cannot serialize an order without a delivery selection")
        if payment is None:
            raise IncompleteOrderError("cannot serialize an order without a payment method")

        items = list(items)
        if not items:
            raise IncompleteOrderError("cannot serialize an order without items")

        subtotal = to_money(sum((i.price * i.quantity for i in items), ZERO))
        total = to_money(subtotal + delivery.fee)

        lines = [f"*🍔 NOVO PEDIDO - {self.store_name.upper()} 🍔*", ""]
        lines += self._customer_lines(customer)
        lines.append("")
        lines += self._item_lines(items)
        lines.append("")
        lines += self._delivery_lines(delivery)
        lines.append("")
        lines += self._payment_lines(payment)
        lines.append("")
        if observations:
            lines += [f"Observações: {observations}", ""]
        lines += self._totals_lines(subtotal, delivery.fee, total)
        return "\n".join(lines)

    def link_for(self, text: str) -> OrderMessage:
        encoded = encode_uri_component(text)
        return OrderMessage(
            text=text,
            encoded_text=encoded,
            url=f"https://{self.host}/{self.destination}?text={encoded}",
        )

    def serialize(self, customer, items, delivery, payment, observations=None) -> OrderMessage:
        return self.link_for(self.render(customer, items, delivery, payment, observations))

    def follow_up(self, order_id: str) -> OrderMessage:
        return self.link_for(f"Olá! Gostaria de acompanhar meu pedido {order_id}. Obrigado!")

    # =====================================================
    # BLOCOS
    # =====================================================
    def _customer_lines(self, customer: Customer | None):
        name = customer.name if customer and customer.name else "Cliente"
        contact = customer.contact if customer else ""
        return [f"Cliente: {name}", f"Contato: {contact}"]

    def _item_lines(self, items):
        lines = ["*-- ITENS DO PEDIDO --*"]
        for item in items:
            lines.append(f"- {item.quantity}x {item.name} ({format_brl(item.line_total)})")
            for addon in item.addons:
                lines.append(f"  + {addon.name} ({format_brl(addon.price)})")
            if item.observations:
                lines.append(f"  _Obs: {item.observations}_")
        return lines

    def _delivery_lines(self, delivery: DeliverySelection):
        lines = ["*-- ENTREGA --*"]
        if delivery.type == DeliveryType.DELIVERY:
            address = delivery.address
            street = f"{address.street}, {address.number}"
            if address.complement:
                street += f", {address.complement}"
            lines.append("Tipo: Delivery")
            lines.append(f"Endereço: {street}, {address.neighborhood}")
            lines.append(f"Cidade: {address.city} - {address.state}, CEP {address.formatted_cep}")
            if address.reference:
                lines.append(f"Referência: {address.reference}")
        else:
            lines.append("Tipo: Retirar no Local")
        lines.append(f"Tempo estimado: {delivery.estimated_time}")
        return lines

    def _payment_lines(self, payment: PaymentSelection):
        lines = ["*-- PAGAMENTO --*", f"Forma: {payment.label}"]
        detail = payment.detail
        if isinstance(detail, CashDetail) and detail.needs_change:
            lines.append(f"Troco para: {format_brl(detail.tendered_amount)}")
            lines.append(f"Troco: {format_brl(detail.change)}")
        elif isinstance(detail, CreditDetail):
            plan = f"Parcelamento: {detail.installments}x de {format_brl(detail.installment_amount)} sem juros"
            last = detail.installment_amounts[-1]
            if last != detail.installment_amount:
                plan += f" (última de {format_brl(last)})"
            lines.append(plan)
        return lines

    def _totals_lines(self, subtotal: Decimal, fee: Decimal, total: Decimal):
        lines = [DIVIDER, f"Subtotal: {format_brl(subtotal)}"]
        if fee > ZERO:
            lines.append(f"Taxa de Entrega: {format_brl(fee)}")
        lines.append(f"*TOTAL DO PEDIDO: {format_brl(total)}*")
        return lines
