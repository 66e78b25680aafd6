# storefront/api/routers/checkout.py
from fastapi import APIRouter, HTTPException

from storefront.api.deps import delivery_calculator, get_shopper, payment_validator, postal_code_client
from storefront.domain.errors import CheckoutError
from storefront.domain.schemas import (
    CheckoutOut,
    DeliveryIn,
    LoginIn,
    ObservationsIn,
    OrderOut,
    PaymentIn,
)

router = APIRouter(prefix="/checkout", tags=["checkout"])


def _checkout_out(shopper_id: str) -> dict:
    ctx = get_shopper(shopper_id)
    session = ctx.checkout.session
    return {
        **session.model_dump(),
        "subtotal": ctx.cart.total_price(),
        "total": ctx.checkout.final_total(),
    }


@router.get("/postal-codes/{cep}")
def lookup_postal_code(cep: str):
    """
    Auto-preenchimento do endereco. Falha na busca devolve 404,
    o cliente continua podendo digitar o endereco.
    """
    data = postal_code_client.lookup(cep)
    if data is None:
        raise HTTPException(status_code=404, detail="CEP não encontrado")
    return data


@router.get("/{shopper_id}", response_model=CheckoutOut)
def get_checkout(shopper_id: str):
    return _checkout_out(shopper_id)


@router.post("/{shopper_id}/start", response_model=CheckoutOut)
def start_checkout(shopper_id: str):
    ctx = get_shopper(shopper_id)
    if not ctx.checkout.start():
        raise HTTPException(status_code=400, detail=ctx.checkout.error)
    return _checkout_out(shopper_id)


@router.post("/{shopper_id}/login", response_model=CheckoutOut)
def login(shopper_id: str, payload: LoginIn):
    ctx = get_shopper(shopper_id)
    if not ctx.identity.login(payload.contact, payload.password):
        raise HTTPException(status_code=401, detail="WhatsApp ou senha inválidos")
    ctx.checkout.sync_identity()
    return _checkout_out(shopper_id)


@router.post("/{shopper_id}/delivery", response_model=CheckoutOut)
def choose_delivery(shopper_id: str, payload: DeliveryIn):
    ctx = get_shopper(shopper_id)

    address = payload.address.model_dump() if payload.address else None
    if payload.use_saved_address:
        customer = ctx.identity.current_customer()
        if customer and customer.addresses:
            address = customer.addresses[0]

    quote = delivery_calculator.quote(payload.type, address)
    if not quote.ok:
        raise HTTPException(status_code=422, detail={"errors": quote.errors})

    try:
        ctx.checkout.set_delivery(quote.selection)
        ctx.checkout.next_step()
    except CheckoutError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _checkout_out(shopper_id)


@router.get("/{shopper_id}/installments")
def installment_options(shopper_id: str):
    ctx = get_shopper(shopper_id)
    return payment_validator.installment_options(ctx.checkout.final_total())


@router.post("/{shopper_id}/payment", response_model=CheckoutOut)
def choose_payment(shopper_id: str, payload: PaymentIn):
    ctx = get_shopper(shopper_id)

    outcome = payment_validator.validate(
        payload.method,
        ctx.checkout.final_total(),
        needs_change=payload.needs_change,
        tendered=payload.tendered,
        installments=payload.installments,
    )
    if not outcome.ok:
        raise HTTPException(status_code=422, detail={"code": outcome.error, "message": outcome.message})

    try:
        ctx.checkout.set_payment(outcome.selection)
        ctx.checkout.next_step()
    except CheckoutError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _checkout_out(shopper_id)


@router.post("/{shopper_id}/observations", response_model=CheckoutOut)
def set_observations(shopper_id: str, payload: ObservationsIn):
    get_shopper(shopper_id).checkout.set_observations(payload.observations)
    return _checkout_out(shopper_id)


@router.post("/{shopper_id}/back", response_model=CheckoutOut)
def previous_step(shopper_id: str):
    get_shopper(shopper_id).checkout.previous_step()
    return _checkout_out(shopper_id)


@router.post("/{shopper_id}/reset", response_model=CheckoutOut)
def reset_checkout(shopper_id: str):
    get_shopper(shopper_id).checkout.reset()
    return _checkout_out(shopper_id)


@router.post("/{shopper_id}/submit", response_model=OrderOut)
def submit_order(shopper_id: str):
    """
    Gera a mensagem do pedido e o link do WhatsApp.
    O carrinho e esvaziado e o checkout vai para SUCCESS.
    """
    ctx = get_shopper(shopper_id)
    try:
        return ctx.orders.submit()
    except CheckoutError as e:
        raise HTTPException(status_code=409, detail=str(e))
