# storefront/services/delivery_service.py
import re
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict

from storefront.domain.models import Address, DeliveryQuote, DeliverySelection, DeliveryType
from storefront.utils.logging import get_logger
from storefront.utils.money import ZERO, to_money
from storefront.utils.settings import DELIVERY_ETA, DELIVERY_FEE, PICKUP_ETA

logger = get_logger(__name__)

CEP_DIGITS = 8

REQUIRED_ADDRESS_FIELDS = {
    "cep": "CEP",
    "street": "Rua",
    "number": "Número",
    "neighborhood": "Bairro",
    "city": "Cidade",
    "state": "Estado",
}
OPTIONAL_ADDRESS_FIELDS = ("complement", "reference")


def normalize_cep(value) -> str:
    return re.sub(r"\D", "", str(value or ""))


class DeliveryFeeCalculator:
    """
    Calcula taxa e tempo estimado para a selecao de entrega.

    Taxa fixa por enquanto; fee_for() pode ser sobrescrito para calcular
    por distancia ou zona sem mudar quem chama quote().
    Erros de validacao voltam como mensagens por campo, nunca como excecao.
    """

    def __init__(
        self,
        delivery_fee: Decimal | str | None = None,
        delivery_eta: str = DELIVERY_ETA,
        pickup_eta: str = PICKUP_ETA,
    ):
        self.delivery_fee = to_money(delivery_fee if delivery_fee is not None else DELIVERY_FEE)
        self.delivery_eta = delivery_eta
        self.pickup_eta = pickup_eta

    def fee_for(self, address: Address) -> Decimal:
        return self.delivery_fee

    def validate_address(self, raw: Address | Dict[str, Any] | None) -> Dict[str, str]:
        if raw is None:
            return {"address": "Defina um endereço para entrega"}
        if isinstance(raw, Address):
            raw = raw.model_dump()

        errors = {}
        for field, label in REQUIRED_ADDRESS_FIELDS.items():
            value = raw.get(field)
            if value is None or not str(value).strip():
                errors[field] = f"Campo {label} é obrigatório"

        if "cep" not in errors and len(normalize_cep(raw.get("cep"))) != CEP_DIGITS:
            errors["cep"] = f"CEP deve ter {CEP_DIGITS} dígitos"
        return errors

    def build_address(self, raw: Address | Dict[str, Any]) -> Address:
        if isinstance(raw, Address):
            raw = raw.model_dump()

        data = {field: str(raw[field]).strip() for field in REQUIRED_ADDRESS_FIELDS}
        data["cep"] = normalize_cep(data["cep"])
        for field in OPTIONAL_ADDRESS_FIELDS:
            value = raw.get(field)
            data[field] = str(value).strip() if value and str(value).strip() else None
        return Address(**data)

    def quote(self, delivery_type, address: Address | Dict[str, Any] | None = None) -> DeliveryQuote:
        try:
            delivery_type = DeliveryType(delivery_type)
        except ValueError:
            return DeliveryQuote(errors={"type": "Selecione um tipo de entrega"})

        if delivery_type == DeliveryType.PICKUP:
            return DeliveryQuote(
                selection=DeliverySelection(
                    type=DeliveryType.PICKUP,
                    fee=ZERO,
                    estimated_time=self.pickup_eta,
                )
            )

        errors = self.validate_address(address)
        if errors:
            logger.info(f"Endereco de entrega invalido: {sorted(errors)}")
            return DeliveryQuote(errors=errors)

        normalized = self.build_address(address)
        fee = to_money(self.fee_for(normalized))
        return DeliveryQuote(
            selection=DeliverySelection(
                type=DeliveryType.DELIVERY,
                address=normalized,
                fee=fee,
                estimated_time=self.delivery_eta,
            )
        )


def estimated_arrival(time_range: str, now: datetime | None = None) -> str:
    """
    Horario previsto (HH:MM) usando o limite superior da faixa, ex. "45-60 minutos" -> agora + 60min.
    Faixa sem numeros devolve o proprio texto.
    """
    numbers = [int(n) for n in re.findall(r"\d+", time_range or "")]
    if not numbers:
        return time_range
    now = now or datetime.now()
    return (now + timedelta(minutes=max(numbers))).strftime("%H:%M")
