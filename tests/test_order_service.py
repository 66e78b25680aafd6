"""Tests for the order submission use case."""

from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from storefront.domain.errors import IncompleteOrderError, InvalidTransitionError
from storefront.domain.models import CheckoutStep
from storefront.services.checkout_service import CheckoutStateMachine
from storefront.services.delivery_service import DeliveryFeeCalculator
from storefront.services.notification_service import NotificationService
from storefront.services.order_message import OrderMessageSerializer
from storefront.services.order_service import OrderService, generate_order_id
from storefront.services.payment_service import PaymentPlanValidator


def _service(cart, identity, notifier=None):
    machine = CheckoutStateMachine(cart, identity)
    service = OrderService(
        machine,
        serializer=OrderMessageSerializer(store_name="Burguesia", destination="5511912345678"),
        notifier=notifier or MagicMock(spec=NotificationService),
        id_factory=lambda: "PD654321",
    )
    return machine, service


def _fill(machine, address):
    machine.start()
    machine.set_delivery(DeliveryFeeCalculator(delivery_fee="8.50").quote("delivery", address).selection)
    machine.next_step()
    machine.set_payment(PaymentPlanValidator().validate("pix", machine.final_total()).selection)
    machine.next_step()


class TestSubmit:
    def test_end_to_end(self, cart, pizza, soda, signed_in, address):
        cart.add_item(pizza)
        cart.add_item(soda)
        notifier = MagicMock(spec=NotificationService)
        machine, service = _service(cart, signed_in, notifier)
        _fill(machine, address)

        receipt = service.submit()

        assert receipt["order_id"] == "PD654321"
        assert receipt["total"] == Decimal("58.50")
        assert "TOTAL DO PEDIDO: R$ 58,50" in receipt["text"]
        assert receipt["url"].startswith("https://wa.me/5511912345678?text=")
        assert machine.step == CheckoutStep.SUCCESS
        assert machine.session.order_id == "PD654321"
        assert cart.is_empty()
        notifier.dispatch_order.assert_called_once()
        assert notifier.dispatch_order.call_args.args[0] == "PD654321"

    def test_refused_outside_summary(self, cart, pizza, signed_in):
        cart.add_item(pizza)
        machine, service = _service(cart, signed_in)
        machine.start()
        with pytest.raises(InvalidTransitionError):
            service.submit()
        assert not cart.is_empty()

    def test_handoff_failure_does_not_block_order(self, cart, pizza, signed_in, address):
        cart.add_item(pizza)
        machine, service = _service(cart, signed_in, NotificationService())
        _fill(machine, address)
        with patch("storefront.services.notification_service.send_order_message_task") as task:
            task.delay.side_effect = ConnectionError("broker down")
            receipt = service.submit()
        assert receipt["order_id"] == "PD654321"
        assert machine.step == CheckoutStep.SUCCESS

    def test_cart_change_after_payment_refuses_send(self, cart, pizza, soda, signed_in):
        cart.add_item(pizza)
        notifier = MagicMock(spec=NotificationService)
        machine, service = _service(cart, signed_in, notifier)
        machine.start()
        machine.set_delivery(DeliveryFeeCalculator().quote("pickup").selection)
        machine.next_step()
        machine.set_payment(PaymentPlanValidator().validate("cash", machine.final_total(), needs_change=True, tendered="40").selection)
        machine.next_step()
        assert machine.step == CheckoutStep.SUMMARY

        cart.add_item(soda)

        with pytest.raises(IncompleteOrderError):
            service.submit()
        notifier.dispatch_order.assert_not_called()
        assert machine.step == CheckoutStep.PAYMENT
        assert machine.session.payment is None
        assert cart.total_items() == 2

    def test_observations_reach_message(self, cart, pizza, signed_in, address):
        cart.add_item(pizza)
        machine, service = _service(cart, signed_in)
        machine.set_observations("sem talheres")
        _fill(machine, address)
        assert "Observações: sem talheres" in service.submit()["text"]

    def test_preview_uses_signed_in_customer(self, cart, pizza, signed_in, address):
        cart.add_item(pizza)
        machine, service = _service(cart, signed_in)
        _fill(machine, address)
        assert "Cliente: Marcelo" in service.preview()


class TestOrderId:
    def test_uses_last_six_millisecond_digits(self):
        assert generate_order_id(lambda: 1723456789.5) == "PD789500"


class TestNotification:
    def test_dispatch_enqueues_task(self):
        message = OrderMessageSerializer().link_for("oi")
        with patch("storefront.services.notification_service.send_order_message_task") as task:
            assert NotificationService().dispatch_order("PD1", message) is True
        task.delay.assert_called_once_with("PD1", message.url)
