# storefront/utils/money.py
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Converte para Decimal com 2 casas (arredondamento comercial)."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_money(raw) -> Decimal | None:
    """
    Aceita Decimal, int, float ou texto digitado pelo cliente ("60", "60,5", "R$ 60,50").
    Retorna None se nao for um valor valido (inclusive NaN e infinito).
    """
    if raw is None:
        return None
    if isinstance(raw, (Decimal, int, float)):
        text = raw
    else:
        text = str(raw).replace("R$", "").strip().replace(" ", "")
        if not text:
            return None
        # virgula decimal no padrao brasileiro
        if "," in text:
            text = text.replace(".", "").replace(",", ".")

    try:
        value = Decimal(str(text)) if isinstance(text, float) else Decimal(text)
        if not value.is_finite():
            return None
        return to_money(value)
    except InvalidOperation:
        return None


def format_brl(value) -> str:
    # "R$ 1234,50" - sem separador de milhar, igual ao texto enviado ao WhatsApp
    return "R$ " + f"{to_money(value):.2f}".replace(".", ",")
