# storefront/services/order_service.py
import time
from typing import Any, Callable, Dict

from storefront.domain.errors import IncompleteOrderError, InvalidTransitionError
from storefront.domain.models import CheckoutStep
from storefront.services.checkout_service import CheckoutStateMachine
from storefront.services.notification_service import NotificationService
from storefront.services.order_message import OrderMessageSerializer
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def generate_order_id(clock: Callable[[], float] = time.time) -> str:
    # PD + 6 ultimos digitos do timestamp em milissegundos
    millis = int(clock() * 1000)
    return f"PD{str(millis)[-6:]}"


class OrderService:
    """
    Use Case: envio do pedido.

    1. Verifica que o checkout esta no resumo (SUMMARY) e que o pagamento
       ainda corresponde ao total do pedido
    2. Gera a mensagem e o link do WhatsApp
    3. Entrega o link ao canal externo (sem esperar)
    4. Move o checkout para SUCCESS e esvazia o carrinho
    """

    def __init__(
        self,
        checkout: CheckoutStateMachine,
        serializer: OrderMessageSerializer | None = None,
        notifier: NotificationService | None = None,
        id_factory: Callable[[], str] = generate_order_id,
    ):
        self.checkout = checkout
        self.serializer = serializer or OrderMessageSerializer()
        self.notifier = notifier or NotificationService()
        self.id_factory = id_factory

    def preview(self) -> str:
        session = self.checkout.session
        customer = self.checkout.identity.current_customer() if self.checkout.identity else None
        return self.serializer.render(
            customer,
            self.checkout.cart.items,
            session.delivery,
            session.payment,
            observations=session.observations,
        )

    def submit(self) -> Dict[str, Any]:
        session = self.checkout.session
        if session.step != CheckoutStep.SUMMARY:
            raise InvalidTransitionError(f"order can only be sent from the summary step, not '{session.step.value}'")

        if session.payment is None:
            raise IncompleteOrderError("cannot send an order without a payment method")

        # carrinho alterado depois do pagamento: volta para PAYMENT
        if self.checkout.discard_stale_payment():
            raise IncompleteOrderError("order total changed after the payment was chosen")

        text = self.preview()
        message = self.serializer.link_for(text)
        total = self.checkout.final_total()

        order_id = self.id_factory()
        self.notifier.dispatch_order(order_id, message)

        self.checkout.complete(order_id)
        self.checkout.cart.clear()

        logger.info(f"Pedido {order_id} enviado, total {total}")

        return {
            "order_id": order_id,
            "url": message.url,
            "text": message.text,
            "total": total,
            "estimated_time": session.delivery.estimated_time,
            "follow_up_url": self.serializer.follow_up(order_id).url,
        }
