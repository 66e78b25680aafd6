"""Tests for the CEP lookup collaborator."""

from unittest.mock import MagicMock, patch

import requests

from storefront.services.postal_code_client import PostalCodeClient


def _response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


class TestLookup:
    def test_maps_viacep_fields(self):
        payload = {"logradouro": "Praça da Sé", "bairro": "Sé", "localidade": "São Paulo", "uf": "SP"}
        with patch("storefront.services.postal_code_client.requests.get", return_value=_response(payload)) as get:
            data = PostalCodeClient(base_url="https://viacep.test").lookup("01001-000")

        get.assert_called_once_with("https://viacep.test/ws/01001000/json/", timeout=2)
        assert data == {
            "cep": "01001000",
            "street": "Praça da Sé",
            "neighborhood": "Sé",
            "city": "São Paulo",
            "state": "SP",
        }

    def test_not_found(self):
        with patch("storefront.services.postal_code_client.requests.get", return_value=_response({"erro": True})):
            assert PostalCodeClient().lookup("99999999") is None

    def test_malformed_cep_skips_request(self):
        with patch("storefront.services.postal_code_client.requests.get") as get:
            assert PostalCodeClient().lookup("123") is None
        get.assert_not_called()

    def test_network_failure_is_absorbed(self):
        with patch(
            "storefront.services.postal_code_client.requests.get",
            side_effect=requests.ConnectionError("offline"),
        ) as get:
            assert PostalCodeClient().lookup("01001000") is None
        assert get.call_count == 3

    def test_client_error_is_not_retried(self):
        resp = MagicMock()
        resp.raise_for_status.side_effect = requests.HTTPError("400 Bad Request", response=MagicMock(status_code=400))
        with patch("storefront.services.postal_code_client.requests.get", return_value=resp) as get:
            assert PostalCodeClient().lookup("01001000") is None
        assert get.call_count == 1

    def test_server_error_is_retried(self):
        resp = MagicMock()
        resp.raise_for_status.side_effect = requests.HTTPError("503 Service Unavailable", response=MagicMock(status_code=503))
        with patch("storefront.services.postal_code_client.requests.get", return_value=resp) as get:
            assert PostalCodeClient().lookup("01001000") is None
        assert get.call_count == 3
