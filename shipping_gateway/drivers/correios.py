"""
Correios carrier driver.

Placeholder until the Correios contract API is integrated: quoting returns no
offers and label operations are not available.
"""

from typing import Optional
from loguru import logger

from shipping_gateway.config import CorreiosConfig
from shipping_gateway.drivers.base import ShippingDriver
from shipping_gateway.models import ShipmentRequest, RateResult
from shipping_gateway.transport import HttpClient


class CorreiosDriver(ShippingDriver):
    """Correios integration stub."""

    PROVIDER = "correios"

    def __init__(self, config: CorreiosConfig, http: Optional[HttpClient] = None):
        super().__init__(token=config.token)
        self.config = config
        self.http = http or HttpClient(base_uri=config.base_uri, timeout=config.timeout)
        self.http.header_hook = self.with_default_headers

    def get_carrier_name(self) -> str:
        return self.PROVIDER

    async def quote(self, request: ShipmentRequest) -> list[RateResult]:
        logger.debug("Correios quoting not implemented, returning no offers")
        return []

    async def close(self):
        await self.http.close()
