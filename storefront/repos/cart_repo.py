# storefront/repos/cart_repo.py
"""
Repositorios do carrinho: o agregado inteiro e gravado como um blob JSON
(lista de CartLineItem) sob uma unica chave, ex. "cartItems".

load() e chamado uma vez quando o CartStore e criado, save() a cada mutacao.
"""
import json
from abc import ABC, abstractmethod
from typing import Iterable

import redis
from pydantic import ValidationError
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.kv_entry import KeyValueModel
from storefront.domain.models import CartLineItem
from storefront.utils.logging import get_logger
from storefront.utils.retry import redis_retry
from storefront.utils.settings import CART_STORAGE_KEY, REDIS_URL

logger = get_logger(__name__)


class CartRepoError(RuntimeError):
    """Falha do backend de armazenamento (redis, banco)."""


def dump_items(items: Iterable[CartLineItem]) -> str:
    return json.dumps([i.model_dump(mode="json") for i in items], ensure_ascii=False)


def parse_items(raw: str | bytes | None, key: str) -> list[CartLineItem]:
    if not raw:
        return []

    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Blob do carrinho '{key}' corrompido, iniciando carrinho vazio")
        return []

    if not isinstance(data, list):
        logger.warning(f"Blob do carrinho '{key}' nao e uma lista, iniciando carrinho vazio")
        return []

    items = []
    for entry in data:
        try:
            items.append(CartLineItem.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Item invalido ignorado no carrinho '{key}': {e.error_count()} erro(s)")
    return items


class CartRepo(ABC):
    def __init__(self, key: str = CART_STORAGE_KEY):
        self.key = key

    @abstractmethod
    def load(self) -> list[CartLineItem]:
        ...

    @abstractmethod
    def save(self, items: list[CartLineItem]) -> None:
        ...


class InMemoryCartRepo(CartRepo):
    """Armazenamento chave-valor em memoria (testes e processo unico)."""

    def __init__(self, key: str = CART_STORAGE_KEY, store: dict | None = None):
        super().__init__(key)
        self.store = store if store is not None else {}

    def load(self) -> list[CartLineItem]:
        return parse_items(self.store.get(self.key), self.key)

    def save(self, items: list[CartLineItem]) -> None:
        self.store[self.key] = dump_items(items)


class RedisCartRepo(CartRepo):
    def __init__(self, key: str = CART_STORAGE_KEY, client: redis.Redis | None = None, url: str | None = None):
        super().__init__(key)
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)

    @redis_retry()
    def _get(self):
        return self.redis.get(self.key)

    @redis_retry()
    def _set(self, value: str):
        return self.redis.set(self.key, value)

    def load(self) -> list[CartLineItem]:
        try:
            raw = self._get()
        except RedisError as e:
            raise CartRepoError(f"Falha ao ler carrinho '{self.key}' do redis: {e}") from e
        return parse_items(raw, self.key)

    def save(self, items: list[CartLineItem]) -> None:
        try:
            self._set(dump_items(items))
        except RedisError as e:
            raise CartRepoError(f"Falha ao gravar carrinho '{self.key}' no redis: {e}") from e


class SqlCartRepo(CartRepo):
    def __init__(self, db: Session, key: str = CART_STORAGE_KEY):
        super().__init__(key)
        self.db = db

    def load(self) -> list[CartLineItem]:
        try:
            row = self.db.get(KeyValueModel, self.key)
        except SQLAlchemyError as e:
            raise CartRepoError(f"Falha ao ler carrinho '{self.key}': {e}") from e
        return parse_items(row.value if row else None, self.key)

    def save(self, items: list[CartLineItem]) -> None:
        value = dump_items(items)
        try:
            row = self.db.get(KeyValueModel, self.key)
            if row:
                row.value = value
            else:
                self.db.add(KeyValueModel(key=self.key, value=value))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise CartRepoError(f"Falha ao gravar carrinho '{self.key}': {e}") from e
