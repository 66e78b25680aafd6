# storefront/api/deps.py
"""
Sessoes por cliente (shopper id) para a API.
Cada cliente tem seu proprio CartStore + CheckoutStateMachine, nada e compartilhado.
"""
from dataclasses import dataclass

from storefront.data.database import SessionLocal
from storefront.repos.cart_repo import CartRepo, InMemoryCartRepo, RedisCartRepo, SqlCartRepo
from storefront.services.cart_service import CartStore
from storefront.services.checkout_service import CheckoutStateMachine
from storefront.services.delivery_service import DeliveryFeeCalculator
from storefront.services.identity_service import IdentityProvider
from storefront.services.order_service import OrderService
from storefront.services.payment_service import PaymentPlanValidator
from storefront.services.postal_code_client import PostalCodeClient
from storefront.utils.settings import CART_BACKEND, CART_STORAGE_KEY


@dataclass
class ShopperContext:
    cart: CartStore
    identity: IdentityProvider
    checkout: CheckoutStateMachine
    orders: OrderService


_memory_store: dict = {}
_shoppers: dict[str, ShopperContext] = {}

delivery_calculator = DeliveryFeeCalculator()
payment_validator = PaymentPlanValidator()
postal_code_client = PostalCodeClient()


def build_cart_repo(shopper_id: str) -> CartRepo:
    key = f"{CART_STORAGE_KEY}:{shopper_id}"
    if CART_BACKEND == "redis":
        return RedisCartRepo(key=key)
    if CART_BACKEND == "sql":
        return SqlCartRepo(SessionLocal(), key=key)
    return InMemoryCartRepo(key=key, store=_memory_store)


def get_shopper(shopper_id: str) -> ShopperContext:
    ctx = _shoppers.get(shopper_id)
    if ctx is None:
        cart = CartStore(build_cart_repo(shopper_id))
        identity = IdentityProvider()
        checkout = CheckoutStateMachine(cart, identity)
        ctx = ShopperContext(cart=cart, identity=identity, checkout=checkout, orders=OrderService(checkout))
        _shoppers[shopper_id] = ctx
    return ctx


def reset_shoppers() -> None:
    _shoppers.clear()
    _memory_store.clear()
