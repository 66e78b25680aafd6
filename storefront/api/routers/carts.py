#storefront/api/routers/carts.py
from fastapi import APIRouter, HTTPException

from storefront.api.deps import get_shopper
from storefront.domain.models import CartLineItem
from storefront.domain.schemas import CartOut, ItemIn, QuantityIn

router = APIRouter(prefix="/carts", tags=["carts"])


def _cart_out(shopper_id: str) -> dict:
    cart = get_shopper(shopper_id).cart
    return {
        "items": cart.items,
        "total_items": cart.total_items(),
        "total_price": cart.total_price(),
    }


@router.get("/{shopper_id}", response_model=CartOut)
def get_cart(shopper_id: str):
    return _cart_out(shopper_id)


@router.post("/{shopper_id}/items", response_model=CartOut)
def add_item(shopper_id: str, payload: ItemIn):
    get_shopper(shopper_id).cart.add_item(CartLineItem(**payload.model_dump()))
    return _cart_out(shopper_id)


@router.patch("/{shopper_id}/items/{key}", response_model=CartOut)
def update_quantity(shopper_id: str, key: str, payload: QuantityIn):
    cart = get_shopper(shopper_id).cart
    if cart.get(key) is None:
        raise HTTPException(status_code=404, detail="Item não encontrado no carrinho")
    cart.update_quantity(key, payload.quantity)
    return _cart_out(shopper_id)


@router.delete("/{shopper_id}/items/{key}", response_model=CartOut)
def remove_item(shopper_id: str, key: str):
    get_shopper(shopper_id).cart.remove_item(key)
    return _cart_out(shopper_id)


@router.delete("/{shopper_id}", response_model=CartOut)
def clear_cart(shopper_id: str):
    get_shopper(shopper_id).cart.clear()
    return _cart_out(shopper_id)
