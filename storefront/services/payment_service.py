# storefront/services/payment_service.py
# ==============================================================================
# VALIDACAO DO PAGAMENTO
# ==============================================================================
# Valida a forma de pagamento escolhida e calcula os detalhes (troco, parcelas).
# Nenhum pagamento e processado aqui; o resultado vai apenas para a mensagem.
# ==============================================================================
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List

from storefront.domain.models import (
    AmountDetail,
    CashDetail,
    CreditDetail,
    PaymentMethod,
    PaymentOutcome,
    PaymentSelection,
)
from storefront.utils.logging import get_logger
from storefront.utils.money import CENTS, ZERO, parse_money, to_money
from storefront.utils.settings import MAX_INSTALLMENTS

logger = get_logger(__name__)

NO_METHOD = "NoMethod"
UNKNOWN_METHOD = "UnknownMethod"
MISSING_TENDER = "MissingTender"
INVALID_TENDER = "InvalidTender"
INSUFFICIENT_TENDER = "InsufficientTender"
INVALID_INSTALLMENTS = "InvalidInstallments"

MESSAGES = {
    NO_METHOD: "Selecione um método de pagamento",
    UNKNOWN_METHOD: "Método de pagamento não aceito",
    MISSING_TENDER: "Informe o valor para o troco",
    INVALID_TENDER: "Valor para troco deve ser maior que zero",
    INSUFFICIENT_TENDER: "Valor para troco deve ser maior que o total do pedido",
    INVALID_INSTALLMENTS: "Número de parcelas inválido",
}


def split_installments(total: Decimal, count: int) -> List[Decimal]:
    """
    Divide o total em `count` parcelas de round(total / count, 2);
    a ultima parcela absorve a diferenca para que a soma seja exatamente o total.
    """
    total = to_money(total)
    amount = (total / count).quantize(CENTS, rounding=ROUND_HALF_UP)
    amounts = [amount] * count
    amounts[-1] = total - amount * (count - 1)
    return amounts


class PaymentPlanValidator:
    """
    Servico de validacao de pagamento.

    Responsabilidades:
    - cash: troco (valor entregue >= total)
    - credit: parcelas sem juros, de 1 ate max_installments
    - debit/pix: apenas o valor total

    Falhas esperadas voltam como PaymentOutcome(error=...), nunca como excecao.
    """

    def __init__(self, max_installments: int = MAX_INSTALLMENTS):
        self.max_installments = max(1, int(max_installments))

    def _fail(self, code: str, method=None) -> PaymentOutcome:
        logger.info(f"Pagamento recusado ({method}): {code}")
        return PaymentOutcome(error=code, message=MESSAGES[code])

    def select_method(self, method, total) -> PaymentSelection:
        """
        Selecao padrao para um metodo recem-escolhido.
        Trocar de metodo sempre descarta os detalhes anteriores (troco, parcelas).
        """
        method = PaymentMethod(method)
        total = to_money(total)

        if method == PaymentMethod.CASH:
            detail = CashDetail(needs_change=False, tendered_amount=total, change=ZERO)
        elif method == PaymentMethod.CREDIT:
            detail = CreditDetail(
                installments=1,
                installment_amount=total,
                installment_amounts=[total],
            )
        else:
            detail = AmountDetail(total_amount=total)
        return PaymentSelection(method=method, detail=detail)

    def installment_options(self, total) -> List[Dict[str, Any]]:
        total = to_money(total)
        options = []
        for n in range(1, self.max_installments + 1):
            amounts = split_installments(total, n)
            options.append({
                "installments": n,
                "installment_amount": amounts[0],
                "installment_amounts": amounts,
                "total": total,
            })
        return options

    def validate(
        self,
        method,
        total,
        needs_change: bool = False,
        tendered=None,
        installments: int | None = None,
    ) -> PaymentOutcome:
        if method is None or method == "":
            return self._fail(NO_METHOD)
        try:
            method = PaymentMethod(method)
        except ValueError:
            return self._fail(UNKNOWN_METHOD, method)

        total = to_money(total)

        if method == PaymentMethod.CASH:
            return self._validate_cash(total, needs_change, tendered)
        if method == PaymentMethod.CREDIT:
            return self._validate_credit(total, installments)
        return PaymentOutcome(selection=self.select_method(method, total))

    def _validate_cash(self, total: Decimal, needs_change: bool, tendered) -> PaymentOutcome:
        if not needs_change:
            return PaymentOutcome(selection=self.select_method(PaymentMethod.CASH, total))

        if tendered is None or (isinstance(tendered, str) and not tendered.strip()):
            return self._fail(MISSING_TENDER, PaymentMethod.CASH.value)

        amount = parse_money(tendered)
        if amount is None or amount <= ZERO:
            return self._fail(INVALID_TENDER, PaymentMethod.CASH.value)

        if amount < total:
            return self._fail(INSUFFICIENT_TENDER, PaymentMethod.CASH.value)

        detail = CashDetail(
            needs_change=True,
            tendered_amount=amount,
            change=to_money(amount - total),
        )
        return PaymentOutcome(selection=PaymentSelection(method=PaymentMethod.CASH, detail=detail))

    def _validate_credit(self, total: Decimal, installments) -> PaymentOutcome:
        count = 1 if installments is None else installments
        try:
            count = int(count)
        except (TypeError, ValueError):
            return self._fail(INVALID_INSTALLMENTS, PaymentMethod.CREDIT.value)

        if count < 1 or count > self.max_installments:
            return self._fail(INVALID_INSTALLMENTS, PaymentMethod.CREDIT.value)

        amounts = split_installments(total, count)
        detail = CreditDetail(
            installments=count,
            installment_amount=amounts[0],
            installment_amounts=amounts,
        )
        return PaymentOutcome(selection=PaymentSelection(method=PaymentMethod.CREDIT, detail=detail))
