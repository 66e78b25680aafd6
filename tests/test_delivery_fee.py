"""Tests for delivery fee calculation and address validation."""

from datetime import datetime
from decimal import Decimal

from storefront.domain.models import Address, DeliveryType
from storefront.services.delivery_service import DeliveryFeeCalculator, estimated_arrival, normalize_cep


class TestPickup:
    def test_pickup_is_free_with_short_eta(self):
        quote = DeliveryFeeCalculator().quote("pickup")
        assert quote.ok
        assert quote.selection.fee == Decimal("0.00")
        assert quote.selection.address is None
        assert quote.selection.estimated_time == "30-40 minutos"

    def test_pickup_ignores_address(self, address):
        quote = DeliveryFeeCalculator().quote(DeliveryType.PICKUP, address)
        assert quote.selection.address is None


class TestDelivery:
    def test_flat_fee_and_longer_eta(self, address):
        quote = DeliveryFeeCalculator(delivery_fee="8.50").quote("delivery", address)
        assert quote.ok
        assert quote.selection.fee == Decimal("8.50")
        assert quote.selection.estimated_time == "45-60 minutos"

    def test_default_fee(self, address):
        assert DeliveryFeeCalculator().quote("delivery", address).selection.fee == Decimal("5.00")

    def test_cep_is_normalized(self, address):
        selection = DeliveryFeeCalculator().quote("delivery", address).selection
        assert selection.address.cep == "01001000"
        assert selection.address.formatted_cep == "01001-000"

    def test_fields_are_trimmed_and_blank_optionals_dropped(self, address):
        address.update(street="  Rua das Flores ", complement="   ", reference="Perto da praça")
        selection = DeliveryFeeCalculator().quote("delivery", address).selection
        assert selection.address.street == "Rua das Flores"
        assert selection.address.complement is None
        assert selection.address.reference == "Perto da praça"

    def test_accepts_address_model(self, address):
        model = Address(**{**address, "cep": "01001000"})
        assert DeliveryFeeCalculator().quote("delivery", model).ok

    def test_fee_hook_can_be_replaced(self, address):
        class ZoneCalculator(DeliveryFeeCalculator):
            def fee_for(self, addr):
                return Decimal("12") if addr.neighborhood == "Centro" else Decimal("7")

        assert ZoneCalculator().quote("delivery", address).selection.fee == Decimal("12.00")


class TestValidation:
    def test_missing_address(self):
        quote = DeliveryFeeCalculator().quote("delivery")
        assert not quote.ok
        assert "address" in quote.errors

    def test_missing_fields_reported_per_field(self, address):
        address.update(street="", number="   ")
        del address["city"]
        errors = DeliveryFeeCalculator().quote("delivery", address).errors
        assert set(errors) == {"street", "number", "city"}
        assert errors["street"] == "Campo Rua é obrigatório"

    def test_malformed_cep(self, address):
        address["cep"] = "0100-100"
        errors = DeliveryFeeCalculator().quote("delivery", address).errors
        assert errors == {"cep": "CEP deve ter 8 dígitos"}

    def test_unknown_type(self):
        quote = DeliveryFeeCalculator().quote("drone")
        assert quote.errors == {"type": "Selecione um tipo de entrega"}


class TestHelpers:
    def test_normalize_cep(self):
        assert normalize_cep("01.001-000") == "01001000"
        assert normalize_cep(None) == ""

    def test_estimated_arrival_uses_upper_bound(self):
        now = datetime(2025, 8, 12, 19, 30)
        assert estimated_arrival("45-60 minutos", now) == "20:30"

    def test_estimated_arrival_without_numbers(self):
        assert estimated_arrival("em breve") == "em breve"
