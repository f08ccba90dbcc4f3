"""
Freight quote translation for Melhor Envio.

Builds the calculate payload from a ShipmentRequest and maps the offers in
the response to RateResult objects, in the order the carrier returned them.
Quoting never raises: failures are logged and produce an empty list.
"""

from typing import Any, Optional
from loguru import logger

from shipping_gateway.errors import ShippingError
from shipping_gateway.models import ShipmentRequest, RateResult
from shipping_gateway.transport import HttpClient


QUOTE_PATH = "me/shipment/calculate"


def _first_present(data: dict, *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _service_name(offer: dict) -> str:
    name = offer.get("service_name")
    if name is None:
        service = offer.get("service")
        if isinstance(service, dict):
            name = service.get("name")
    if name is None:
        name = offer.get("name")
    return str(name) if name is not None else ""


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


class RateQuoteTranslator:
    """Requests and translates Melhor Envio freight quotes."""

    def __init__(self, http: HttpClient, provider: str = "melhor_envio"):
        self.http = http
        self.provider = provider

    def build_payload(self, request: ShipmentRequest) -> dict[str, Any]:
        """Build the calculate payload for a shipment."""
        options = request.options

        payload: dict[str, Any] = {
            "from": {"postal_code": request.origin_postal_code},
            "to": {"postal_code": request.destination_postal_code},
            "package": {
                **request.wire_dimensions(),
                "weight": request.wire_weight_kg,
            },
            "options": {
                "insurance_value": request.declared_value,
                **options.order_options,
            },
        }

        if options.services:
            payload["services"] = options.services

        if options.products:
            payload["products"] = options.products
            del payload["package"]

        return payload

    def parse_rates(self, decoded: Any) -> list[RateResult]:
        """
        Map a decoded quote response to rate results.

        Accepts a bare list of offers or an object exposing a "data" list.
        Offers without a service name or a usable price are dropped.
        """
        if isinstance(decoded, list):
            offers = decoded
        elif isinstance(decoded, dict) and isinstance(decoded.get("data"), list):
            offers = decoded["data"]
        else:
            logger.warning(f"Unexpected quote response from {self.provider}: {decoded!r}")
            return []

        results = []

        for offer in offers:
            if not isinstance(offer, dict):
                continue

            service = _service_name(offer)
            if not service:
                continue

            price = _to_float(_first_present(offer, "custom_price", "price"))
            if price is None or price < 0:
                logger.debug(f"Skipping {service} offer without a usable price")
                continue

            days = _first_present(offer, "custom_delivery_time", "delivery_time")

            results.append(
                RateResult(
                    provider=self.provider,
                    service=service,
                    price=price,
                    estimated_days=_to_int(days) if days is not None else None,
                    raw=offer,
                )
            )

        return results

    async def quote(self, request: ShipmentRequest) -> list[RateResult]:
        """Request quotes for a shipment; returns [] on any failure."""
        payload = self.build_payload(request)

        try:
            response = await self.http.post(QUOTE_PATH, json=payload)
            decoded = response.json()
        except ShippingError as e:
            logger.error(f"Quote request to {self.provider} failed: {e} (payload: {payload})")
            return []

        rates = self.parse_rates(decoded)
        logger.info(f"Received {len(rates)} quote(s) from {self.provider}")
        return rates
