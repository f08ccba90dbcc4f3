"""Shared test doubles for carrier tests."""

from dataclasses import dataclass, field
from typing import Any, Optional

import orjson
import pytest

from shipping_gateway.config import MelhorEnvioConfig
from shipping_gateway.models import ShipmentRequest
from shipping_gateway.transport import HttpResponse


@dataclass
class RecordedRequest:
    method: str
    path: str
    json: Any = None
    headers: dict[str, str] = field(default_factory=dict)


class FakeHttpClient:
    """
    Scripted stand-in for HttpClient.

    Each queued item is returned in order: an HttpResponse as-is, an exception
    raised, anything else serialized as a 200 JSON body.
    """

    def __init__(self, responses: Optional[list] = None):
        self.responses = list(responses or [])
        self.requests: list[RecordedRequest] = []
        self.header_hook = None
        self.closed = False

    def queue(self, *items):
        self.responses.extend(items)

    def paths(self, method: Optional[str] = None) -> list[str]:
        return [r.path for r in self.requests if method is None or r.method == method]

    async def request(self, method, path, json=None, headers=None):
        headers = dict(headers or {})
        if self.header_hook:
            headers = self.header_hook(headers)

        self.requests.append(RecordedRequest(method, path, json, headers))

        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {path}")

        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, HttpResponse):
            return item
        return HttpResponse(status=200, body=orjson.dumps(item).decode())

    async def get(self, path, headers=None):
        return await self.request("GET", path, headers=headers)

    async def post(self, path, json=None, headers=None):
        return await self.request("POST", path, json=json, headers=headers)

    async def close(self):
        self.closed = True


class RecordingSleep:
    """Async sleep that returns immediately and remembers the delays."""

    def __init__(self):
        self.calls: list[float] = []

    async def __call__(self, delay: float):
        self.calls.append(delay)


def raw_response(body: str, status: int = 200) -> HttpResponse:
    return HttpResponse(status=status, body=body)


# Canned carrier responses for a successful issuance of order-789
CART_RESPONSE = {"id": "cart-item-123"}
CHECKOUT_RESPONSE = {
    "purchase": {
        "id": "purchase-456",
        "orders": [
            {"id": "order-789", "tracking": None, "status": "released"},
        ],
    },
}
GENERATE_RESPONSE = {
    "generate_key": "gen-key-123",
    "order-789": {"message": "Shipment queued for generation", "status": True},
}
PRINT_RESPONSE = {"url": "https://melhorenvio.test/imprimir/ABC123"}
ORDER_RESPONSE = {"id": "order-789", "status": "released", "tracking": "XX123456BR"}


@pytest.fixture
def happy_path_responses():
    return [
        CART_RESPONSE,
        CHECKOUT_RESPONSE,
        GENERATE_RESPONSE,
        PRINT_RESPONSE,
        ORDER_RESPONSE,
    ]


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def me_config():
    """Melhor Envio config with no reconciliation wait."""
    return MelhorEnvioConfig(
        token="test-token",
        base_uri="https://www.melhorenvio.test/api/v2/",
        order_lookup_delay=0,
    )


@pytest.fixture
def shipment():
    """Shipment with everything the cart needs."""
    return ShipmentRequest(
        origin_postal_code="01001-000",
        destination_postal_code="20040-010",
        weight_kg=1.2,
        length_cm=20.0,
        width_cm=15.0,
        height_cm=10.0,
        declared_value=100.0,
        options={
            "service_id": 123,
            "from": {"name": "Sender", "postal_code": "01001000"},
            "to": {"name": "Recipient", "postal_code": "20040010"},
        },
    )
