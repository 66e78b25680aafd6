# storefront/services/cart_service.py
from decimal import Decimal
from typing import Any, Dict

from storefront.domain.models import CartLineItem
from storefront.repos.cart_repo import CartRepo, CartRepoError, InMemoryCartRepo
from storefront.utils.logging import get_logger
from storefront.utils.money import ZERO, to_money

logger = get_logger(__name__)


class CartStore:
    """
    Agregado do carrinho de um cliente.

    commands (add, remove, update_quantity, clear) modificam o estado e gravam no repo
    queries (items, total_items, total_price) apenas leitura

    Nenhuma operacao falha: quantidade <= 0 remove a linha, chave inexistente e ignorada.
    Itens sao agrupados somente pela chave `id` (adicionais e observacao nao entram na chave).
    """

    def __init__(self, repo: CartRepo | None = None):
        self.repo = repo or InMemoryCartRepo()
        try:
            self._items: list[CartLineItem] = self.repo.load()
        except CartRepoError as e:
            # sem dados salvos o cliente continua com carrinho vazio
            logger.warning(f"Nao foi possivel carregar o carrinho: {e}")
            self._items = []

    #query - leitura
    @property
    def items(self) -> list[CartLineItem]:
        return [i.model_copy(deep=True) for i in self._items]

    def get(self, key) -> CartLineItem | None:
        key = str(key)
        found = next((i for i in self._items if i.id == key), None)
        return found.model_copy(deep=True) if found else None

    def is_empty(self) -> bool:
        return not self._items

    def total_items(self) -> int:
        return sum(i.quantity for i in self._items)

    def total_price(self) -> Decimal:
        # somente preco unitario x quantidade, adicionais ficam fora do subtotal
        return to_money(sum((i.price * i.quantity for i in self._items), ZERO))

    def snapshot(self) -> Dict[str, Any]:
        return {
            "items": [i.model_dump(mode="json") for i in self._items],
            "total_items": self.total_items(),
            "total_price": self.total_price(),
        }

    #commands
    def add_item(self, item: CartLineItem | Dict[str, Any]) -> None:
        if not isinstance(item, CartLineItem):
            item = CartLineItem.model_validate(item)

        existing = next((i for i in self._items if i.id == item.id), None)
        if existing:
            logger.info(
                f"Produto {item.id} ja esta no carrinho, quantidade "
                f"{existing.quantity} -> {existing.quantity + 1}"
            )
            existing.quantity += 1
        else:
            logger.info(f"Adicionando produto {item.id} ao carrinho")
            self._items.append(item.model_copy(update={"quantity": 1}, deep=True))

        self._persist()

    def remove_item(self, key) -> None:
        key = str(key)
        self._items = [i for i in self._items if i.id != key]
        logger.info(f"Produto {key} removido do carrinho")
        self._persist()

    def update_quantity(self, key, new_quantity: int) -> None:
        key = str(key)
        if new_quantity <= 0:
            self.remove_item(key)
            return

        for item in self._items:
            if item.id == key:
                item.quantity = int(new_quantity)
                break
        self._persist()

    def clear(self) -> None:
        self._items = []
        logger.info("Carrinho esvaziado")
        self._persist()

    def _persist(self) -> None:
        try:
            self.repo.save(self._items)
        except CartRepoError as e:
            # estado em memoria continua valido, a gravacao sera refeita na proxima mutacao
            logger.error(f"Falha ao gravar carrinho: {e}")
