# storefront/services/checkout_service.py
"""
Maquina de estados do checkout.

AUTH -> DELIVERY -> PAYMENT -> SUMMARY -> SUCCESS

- AUTH e pulado automaticamente quando o cliente ja esta logado
- SUCCESS e terminal e so e alcancado por complete(), depois do envio do pedido
- a maquina nao valida os dados de entrega/pagamento, quem chama usa
  DeliveryFeeCalculator / PaymentPlanValidator antes de set_delivery / set_payment
"""
from decimal import Decimal

from storefront.domain.errors import InvalidTransitionError
from storefront.domain.models import (
    CheckoutSession,
    CheckoutStep,
    DeliverySelection,
    PaymentSelection,
)
from storefront.services.cart_service import CartStore
from storefront.services.identity_service import IdentityProvider
from storefront.utils.logging import get_logger
from storefront.utils.money import ZERO, to_money

logger = get_logger(__name__)

EMPTY_CART = "Carrinho vazio. Adicione itens antes de finalizar o pedido."
LOGIN_REQUIRED = "Faça login ou cadastre-se para continuar"
DELIVERY_REQUIRED = "Selecione um tipo de entrega"
PAYMENT_REQUIRED = "Selecione um método de pagamento"
PAYMENT_OUTDATED = "O total do pedido mudou. Escolha a forma de pagamento novamente."
OBSERVATIONS_MAX_LENGTH = 200


class CheckoutStateMachine:
    def __init__(self, cart: CartStore, identity: IdentityProvider | None = None):
        self.cart = cart
        self.identity = identity
        self.session = CheckoutSession()

    # =====================================================
    # QUERY
    # =====================================================
    @property
    def step(self) -> CheckoutStep:
        return self.session.step

    @property
    def error(self) -> str | None:
        return self.session.error

    def is_authenticated(self) -> bool:
        return self.identity is None or self.identity.is_authenticated()

    def final_total(self) -> Decimal:
        fee = self.session.delivery.fee if self.session.delivery else ZERO
        return to_money(self.cart.total_price() + fee)

    def payment_is_current(self) -> bool:
        payment = self.session.payment
        return payment is None or payment.covered_total == self.final_total()

    # =====================================================
    # TRANSICOES
    # =====================================================
    def _move(self, target: CheckoutStep) -> None:
        logger.info(f"Checkout: {self.session.step.value} -> {target.value}")
        self.session.step = target

    def start(self) -> bool:
        self.session.error = None

        if self.cart.is_empty():
            self.session.error = EMPTY_CART
            return False

        self._move(CheckoutStep.DELIVERY if self.is_authenticated() else CheckoutStep.AUTH)
        return True

    def sync_identity(self) -> bool:
        """Pula AUTH assim que o colaborador de identidade reporta o cliente logado."""
        if (
            self.session.step == CheckoutStep.AUTH
            and not self.cart.is_empty()
            and self.identity is not None
            and self.identity.is_authenticated()
        ):
            self.session.error = None
            self._move(CheckoutStep.DELIVERY)
            return True
        return False

    def next_step(self) -> bool:
        current = self.session.step

        if current == CheckoutStep.SUCCESS:
            return False

        if current == CheckoutStep.SUMMARY:
            # SUCCESS somente via complete(), depois do envio
            raise InvalidTransitionError("SUCCESS is only reachable through complete() after a successful send")

        blocking = self._blocking_error(current)
        if blocking:
            self.session.error = blocking
            return False

        self.session.error = None
        self._move(current.following())
        return True

    def previous_step(self) -> bool:
        current = self.session.step
        # AUTH nao tem anterior, SUCCESS e terminal (use reset)
        if current in (CheckoutStep.AUTH, CheckoutStep.SUCCESS):
            return False

        self.session.error = None
        self._move(current.preceding())
        return True

    def complete(self, order_id: str) -> None:
        if self.session.step != CheckoutStep.SUMMARY:
            raise InvalidTransitionError(f"cannot complete checkout from step '{self.session.step.value}'")
        if self.session.delivery is None or self.session.payment is None:
            raise InvalidTransitionError("cannot complete checkout without delivery and payment selections")

        self.session.order_id = order_id
        self.session.error = None
        self._move(CheckoutStep.SUCCESS)

    def discard_stale_payment(self) -> bool:
        """
        Descarta o pagamento se o carrinho mudou depois da escolha
        (troco/parcelas calculados sobre outro total). Do resumo volta para PAYMENT.
        """
        if self.payment_is_current():
            return False

        logger.info("Total do pedido mudou, pagamento descartado")
        self.session.payment = None
        if self.session.step == CheckoutStep.SUMMARY:
            self._move(CheckoutStep.PAYMENT)
        self.session.error = PAYMENT_OUTDATED
        return True

    def reset(self) -> None:
        # o carrinho e limpo separadamente por quem chama
        logger.info("Checkout reiniciado")
        self.session = CheckoutSession()

    def _blocking_error(self, current: CheckoutStep) -> str | None:
        if current == CheckoutStep.AUTH and not self.is_authenticated():
            return LOGIN_REQUIRED
        if current == CheckoutStep.DELIVERY and self.session.delivery is None:
            return DELIVERY_REQUIRED
        if current == CheckoutStep.PAYMENT:
            if self.session.payment is None:
                return PAYMENT_REQUIRED
            if self.discard_stale_payment():
                return PAYMENT_OUTDATED
        return None

    # =====================================================
    # DADOS DAS ETAPAS
    # =====================================================
    def set_delivery(self, selection: DeliverySelection) -> None:
        if self.session.step != CheckoutStep.DELIVERY:
            raise InvalidTransitionError(f"delivery can only be changed on the delivery step, not '{self.session.step.value}'")

        previous = self.session.delivery
        self.session.delivery = selection
        self.session.error = None

        # troco/parcelas foram calculados sobre o total antigo
        if self.session.payment is not None and (previous is None or previous.fee != selection.fee):
            logger.info("Taxa de entrega mudou, pagamento descartado")
            self.session.payment = None

    def set_payment(self, selection: PaymentSelection | None) -> None:
        if self.session.step != CheckoutStep.PAYMENT:
            raise InvalidTransitionError(f"payment can only be changed on the payment step, not '{self.session.step.value}'")

        # substitui por inteiro, detalhes do metodo anterior nao sobrevivem
        self.session.payment = selection
        self.session.error = None

    def set_observations(self, text: str | None) -> None:
        """Observacoes gerais do pedido, enviadas na mensagem. Limitadas a 200 caracteres."""
        text = text.strip() if text else ""
        self.session.observations = text[:OBSERVATIONS_MAX_LENGTH] or None

    def clear_error(self) -> None:
        self.session.error = None
