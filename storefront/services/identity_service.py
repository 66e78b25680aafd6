# storefront/services/identity_service.py
from storefront.domain.models import Address, Customer
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# cliente de demonstracao; autenticacao real fica fora deste servico
DEMO_CUSTOMERS = {
    "11999998888": {
        "password": "1234",
        "customer": Customer(
            name="Marcelo",
            contact="11999998888",
            addresses=[
                Address(
                    cep="01001000",
                    street="Rua das Flores",
                    number="123",
                    neighborhood="Centro",
                    city="São Paulo",
                    state="SP",
                )
            ],
        ),
    },
}


class IdentityProvider:
    """
    Colaborador de identidade do checkout: login simulado por contato + senha.
    A maquina de estados so pergunta is_authenticated().
    """

    def __init__(self, directory: dict | None = None):
        self.directory = directory if directory is not None else DEMO_CUSTOMERS
        self._customer: Customer | None = None

    def login(self, contact: str, password: str) -> bool:
        entry = self.directory.get((contact or "").strip())
        if not entry or entry["password"] != password:
            logger.info(f"Login recusado para {contact}")
            return False

        self._customer = entry["customer"].model_copy(deep=True)
        logger.info(f"Cliente {self._customer.name} autenticado")
        return True

    def sign_in_as(self, customer: Customer) -> None:
        self._customer = customer

    def logout(self) -> None:
        self._customer = None

    def is_authenticated(self) -> bool:
        return self._customer is not None

    def current_customer(self) -> Customer | None:
        return self._customer
