"""
Melhor Envio carrier driver.

Quotes go through the calculate endpoint; labels through the cart-based
issuance workflow. Tracking is not offered by this driver.
"""

import asyncio
from typing import Optional
from loguru import logger

from shipping_gateway.config import MelhorEnvioConfig
from shipping_gateway.drivers.base import ShippingDriver
from shipping_gateway.models import ShipmentRequest, RateResult, LabelResult
from shipping_gateway.quotes import RateQuoteTranslator
from shipping_gateway.retry import Sleep
from shipping_gateway.transport import HttpClient
from shipping_gateway.workflow import LabelWorkflow


class MelhorEnvioDriver(ShippingDriver):
    """
    Melhor Envio API integration.

    Requires a Melhor Envio API token. Set use_sandbox to target the sandbox
    environment instead of production.
    """

    PROVIDER = "melhor_envio"

    def __init__(
        self,
        config: MelhorEnvioConfig,
        http: Optional[HttpClient] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        super().__init__(token=config.token)
        self.config = config

        self.http = http or HttpClient(
            base_uri=config.effective_base_uri,
            timeout=config.timeout,
        )
        # Every request leaves with the JSON/auth headers
        self.http.header_hook = self.with_default_headers

        self.quotes = RateQuoteTranslator(self.http, provider=self.PROVIDER)
        self.workflow = LabelWorkflow(self.http, config, provider=self.PROVIDER, sleep=sleep)

        if config.use_sandbox:
            logger.info(f"Melhor Envio driver using sandbox at {config.effective_base_uri}")

    def get_carrier_name(self) -> str:
        return self.PROVIDER

    async def quote(self, request: ShipmentRequest) -> list[RateResult]:
        return await self.quotes.quote(request)

    async def issue_label(self, request: ShipmentRequest) -> LabelResult:
        """Run the full cart, checkout, generate, print and reconcile flow."""
        return await self.workflow.run(request)

    async def print_label(self, request: ShipmentRequest) -> LabelResult:
        """Same flow as issue_label; every call purchases a new label."""
        return await self.workflow.run(request)

    async def close(self):
        await self.http.close()
