# importa os modelos para registra-los no Base.metadata
from storefront.data.models.kv_entry import KeyValueModel

__all__ = ["KeyValueModel"]
