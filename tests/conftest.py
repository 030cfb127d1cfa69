import json
import os

import pytest
import requests


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch, tmp_path):
    """Keep developer INVENTORY_API_* variables and .env files out of the tests."""
    for name in list(os.environ):
        if name.startswith("INVENTORY_API_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def _make_response(status_code=200, body=None, url="http://test.local/api/v1/x"):
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    if body is None:
        response._content = b""
    elif isinstance(body, (bytes, str)):
        response._content = body.encode() if isinstance(body, str) else body
    else:
        response._content = json.dumps(body).encode()
    return response


class FakeSession:
    """Records calls and replays queued responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        return self.responses.pop(0)


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def order_document():
    return {
        "data": {
            "id": "1",
            "type": "purchase-orders",
            "attributes": {"orderNumber": "PO-0001", "total": 100},
            "relationships": {
                "supplier": {"data": {"type": "contacts", "id": "9"}},
                "items": {
                    "data": [
                        {"type": "purchase-order-items", "id": "11"},
                        {"type": "purchase-order-items", "id": "12"},
                    ]
                },
            },
        },
        "included": [
            {"id": "9", "type": "contacts", "attributes": {"name": "Acme"}},
            {
                "id": "11",
                "type": "purchase-order-items",
                "attributes": {"quantity": 2},
                "relationships": {"product": {"data": {"type": "products", "id": "5"}}},
            },
            {
                "id": "12",
                "type": "purchase-order-items",
                "attributes": {"quantity": 1},
                "relationships": {"product": {"data": {"type": "products", "id": "6"}}},
            },
            {"id": "5", "type": "products", "attributes": {"sku": "BOLT-10"}},
        ],
        "meta": {"page": {"total": 1}},
        "links": {"self": "http://test.local/api/v1/purchase-orders/1"},
    }
