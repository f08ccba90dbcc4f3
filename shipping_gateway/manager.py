"""
Shipping Manager.
Selects carrier drivers by name and fans quotes out across providers.
"""

import asyncio
from typing import Callable, Optional
from loguru import logger

from shipping_gateway.config import GatewayConfig, get_config
from shipping_gateway.drivers import ShippingDriver, MelhorEnvioDriver, CorreiosDriver
from shipping_gateway.errors import ConfigurationError
from shipping_gateway.models import ShipmentRequest, RateResult


class ShippingManager:
    """
    Registry of carrier drivers.

    Features:
    - Lazy driver creation, one instance per name
    - Default driver from configuration
    - Concurrent quoting across every configured provider
    """

    def __init__(self, config: Optional[GatewayConfig] = None):
        self.config = config or get_config()
        self._drivers: dict[str, ShippingDriver] = {}
        self._factories: dict[str, Callable[[], ShippingDriver]] = {
            "melhor_envio": lambda: MelhorEnvioDriver(self.config.melhor_envio),
            "correios": lambda: CorreiosDriver(self.config.correios),
        }

    def register(self, name: str, factory: Callable[[], ShippingDriver]):
        """Register a driver factory under a name, replacing any existing one."""
        self._factories[name] = factory
        self._drivers.pop(name, None)

    @property
    def driver_names(self) -> list[str]:
        return list(self._factories)

    def driver(self, name: Optional[str] = None) -> ShippingDriver:
        """Get the driver for a carrier (the configured default if omitted)."""
        name = name or self.config.default_driver

        if name not in self._drivers:
            factory = self._factories.get(name)
            if factory is None:
                raise ConfigurationError(f"Unsupported shipping driver [{name}]")

            self._drivers[name] = factory()
            logger.info(f"Shipping driver '{name}' created")

        return self._drivers[name]

    async def get_rates_from_all_providers(
        self, request: ShipmentRequest
    ) -> dict[str, list[RateResult]]:
        """
        Quote a shipment with every registered provider.

        Returns:
            Dict mapping provider names to their offers
        """
        names = self.driver_names
        tasks = [self._quote(name, request) for name in names]

        results = await asyncio.gather(*tasks, return_exceptions=True)

        rates: dict[str, list[RateResult]] = {}
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.error(f"Quote from {name} failed: {result}")
                rates[name] = []
            else:
                rates[name] = result

        return rates

    async def _quote(self, name: str, request: ShipmentRequest) -> list[RateResult]:
        # Driver creation runs inside the gathered task
        return await self.driver(name).quote(request)

    async def close(self):
        """Close every driver created so far."""
        for driver in self._drivers.values():
            await driver.close()
        self._drivers.clear()
