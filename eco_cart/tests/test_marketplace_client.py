import pytest
import requests

from eco_cart.marketplace_client import MarketplaceClient, SourceFetchError, load_catalog


class _Resp:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _Http:
    """Stands in for HttpClient: maps a path to a canned response or exception."""

    def __init__(self, routes, token="tok"):
        self.routes = routes
        self.token = token
        self.calls = []

    def get(self, path, *, params=None):
        self.calls.append(path)
        out = self.routes[path]
        if isinstance(out, Exception):
            raise out
        return out


def _client(routes, token="tok"):
    return MarketplaceClient(api_url="http://api.test", http=_Http(routes, token=token))


def test_fetch_list_payload():
    rows = [{"_id": "a", "name": "Clock"}]
    client = _client({"/api/marketplace": _Resp(payload=rows)})
    assert client.fetch_all_products() == rows


def test_fetch_wrapped_payload():
    client = _client({"/api/marketplace": _Resp(payload={"success": True, "data": [{"_id": "a"}]})})
    assert client.fetch_all_products() == [{"_id": "a"}]

    client = _client({"/api/marketplace": _Resp(payload={"items": []})})
    assert client.fetch_all_products() == []


def test_fetch_http_error():
    client = _client({"/api/marketplace": _Resp(status_code=500, text="boom")})
    with pytest.raises(SourceFetchError, match="500"):
        client.fetch_all_products()


def test_fetch_transport_error():
    client = _client({"/api/marketplace": requests.ConnectionError("refused")})
    with pytest.raises(SourceFetchError):
        client.fetch_all_products()


def test_fetch_bad_json_and_bad_shape():
    client = _client({"/api/marketplace": _Resp(payload=ValueError("not json"))})
    with pytest.raises(SourceFetchError):
        client.fetch_all_products()

    client = _client({"/api/marketplace": _Resp(payload={"message": "ok"})})
    with pytest.raises(SourceFetchError):
        client.fetch_all_products()


def test_token_balance():
    client = _client({"/api/auth/me": _Resp(payload={"user": {"ecoWallet": {"currentBalance": 75}}})})
    assert client.get_token_balance() == 75


def test_token_balance_unauthenticated():
    client = _client({}, token=None)
    assert client.get_token_balance() == 0
    assert client.http.calls == []

    client = _client({"/api/auth/me": _Resp(status_code=401)})
    assert client.get_token_balance() == 0


def test_token_balance_missing_wallet():
    client = _client({"/api/auth/me": _Resp(payload={"name": "Asha"})})
    assert client.get_token_balance() == 0


def test_load_catalog_normalizes():
    rows = [
        {"_id": "a", "name": "Clock", "price": {"fiatAmount": 300, "tokenAmount": 100}},
        {"_id": "a", "name": "Clock again"},
    ]
    products, err = load_catalog(_client({"/api/marketplace": _Resp(payload=rows)}))
    assert err is None
    assert [p.name for p in products] == ["Clock"]


def test_load_catalog_failure_is_empty():
    products, err = load_catalog(_client({"/api/marketplace": _Resp(status_code=503)}))
    assert products == []
    assert isinstance(err, SourceFetchError)


def test_token_balance_data_wrapped_user():
    client = _client({"/api/auth/me": _Resp(payload={"data": {"ecoWallet": {"currentBalance": "40"}}})})
    assert client.get_token_balance() == 40


@pytest.mark.parametrize("route", [
    requests.Timeout("slow"),
    _Resp(status_code=502, text="bad gateway"),
    _Resp(payload=ValueError("not json")),
    _Resp(payload={"ecoWallet": {"currentBalance": "lots"}}),
    _Resp(payload={"ecoWallet": "empty"}),
    _Resp(payload=["not", "a", "user"]),
])
def test_token_balance_failures_are_zero(route):
    client = _client({"/api/auth/me": route})
    assert client.get_token_balance() == 0
