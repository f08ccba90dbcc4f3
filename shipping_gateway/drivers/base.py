"""
Base class for carrier drivers.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from shipping_gateway.models import ShipmentRequest, RateResult, LabelResult


class ShippingDriver(ABC):
    """Base class for carrier integrations."""

    def __init__(self, token: Optional[str] = None):
        self.token = token

    @abstractmethod
    async def quote(self, request: ShipmentRequest) -> list[RateResult]:
        """Get freight quotes for a shipment."""
        pass

    @abstractmethod
    def get_carrier_name(self) -> str:
        """Get the carrier name."""
        pass

    async def issue_label(self, request: ShipmentRequest) -> LabelResult:
        """Issue a shipping label."""
        raise NotImplementedError(f"{self.get_carrier_name()} does not issue labels")

    async def print_label(self, request: ShipmentRequest) -> LabelResult:
        """Print a shipping label."""
        raise NotImplementedError(f"{self.get_carrier_name()} does not print labels")

    async def track(self, tracking_code: str) -> dict[str, Any]:
        """Get tracking data for a shipment."""
        raise NotImplementedError(f"{self.get_carrier_name()} does not support tracking")

    def with_default_headers(self, headers: dict[str, str]) -> dict[str, str]:
        """JSON Accept header, plus bearer auth unless the caller set one."""
        headers = dict(headers)
        headers.setdefault("Accept", "application/json")

        if self.token and not headers.get("Authorization"):
            headers["Authorization"] = f"Bearer {self.token}"

        return headers

    async def close(self):
        """Release network resources."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
