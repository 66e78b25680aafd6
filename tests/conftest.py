from decimal import Decimal

import pytest

from storefront.celery_worker import celery_app
from storefront.domain.models import CartLineItem, Customer
from storefront.repos.cart_repo import InMemoryCartRepo
from storefront.services.cart_service import CartStore
from storefront.services.identity_service import IdentityProvider

# tasks rodam no proprio processo, sem broker
celery_app.conf.task_always_eager = True


@pytest.fixture
def repo():
    return InMemoryCartRepo()


@pytest.fixture
def cart(repo):
    return CartStore(repo)


@pytest.fixture
def pizza():
    return CartLineItem(id="pizza-margherita", name="Pizza Margherita", price=Decimal("35.00"))


@pytest.fixture
def soda():
    return CartLineItem(id="refri-2l", name="Refrigerante 2L", price=Decimal("15.00"))


@pytest.fixture
def customer():
    return Customer(name="Marcelo", contact="11999998888")


@pytest.fixture
def signed_in(customer):
    identity = IdentityProvider()
    identity.sign_in_as(customer)
    return identity


@pytest.fixture
def address():
    return {
        "cep": "01001-000",
        "street": "Rua das Flores",
        "number": "123",
        "neighborhood": "Centro",
        "city": "São Paulo",
        "state": "SP",
    }
