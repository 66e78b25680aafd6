# storefront/services/postal_code_client.py
import requests
from requests import RequestException

from storefront.services.delivery_service import CEP_DIGITS, normalize_cep
from storefront.utils.logging import get_logger
from storefront.utils.retry import http_retry
from storefront.utils.settings import VIACEP_URL

logger = get_logger(__name__)


class PostalCodeClient:
    """
    Busca de endereco por CEP (API ViaCEP).
    Qualquer falha vira None: o cliente ainda pode preencher o endereco manualmente.
    """

    def __init__(self, base_url: str | None = None, timeout: int = 2):
        self.base_url = (base_url or VIACEP_URL).rstrip("/")
        self.timeout = timeout

    @http_retry()
    def _fetch(self, cep: str) -> dict:
        url = f"{self.base_url}/ws/{cep}/json/"
        logger.info(f"PostalCodeClient GET {url}")

        resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def lookup(self, cep) -> dict | None:
        clean = normalize_cep(cep)
        if len(clean) != CEP_DIGITS:
            return None

        try:
            data = self._fetch(clean)
        except (RequestException, ValueError) as e:
            logger.warning(f"Erro ao buscar CEP {clean}: {e}")
            return None

        if not isinstance(data, dict) or data.get("erro"):
            logger.info(f"CEP {clean} nao encontrado")
            return None

        return {
            "cep": clean,
            "street": data.get("logradouro") or "",
            "neighborhood": data.get("bairro") or "",
            "city": data.get("localidade") or "",
            "state": data.get("uf") or "",
        }
