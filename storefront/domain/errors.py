# storefront/domain/errors.py


class CheckoutError(RuntimeError):
    """Erro de programacao no fluxo de checkout (estado incompleto, transicao invalida)."""


class InvalidTransitionError(CheckoutError):
    pass


class IncompleteOrderError(CheckoutError):
    pass
