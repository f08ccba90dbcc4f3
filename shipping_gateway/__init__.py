"""
Shipping Gateway.
Freight quotes and label issuance against shipping-carrier APIs.
"""

__version__ = "1.0.0"

from shipping_gateway.errors import (
    ShippingError,
    ConfigurationError,
    TransportError,
    HttpStatusError,
    ProtocolError,
    BusinessStateError,
    RetryExhaustedError,
)
from shipping_gateway.models import (
    ShipmentRequest,
    ShipmentOptions,
    RateResult,
    LabelResult,
)
from shipping_gateway.manager import ShippingManager

__all__ = [
    "__version__",
    "ShippingError",
    "ConfigurationError",
    "TransportError",
    "HttpStatusError",
    "ProtocolError",
    "BusinessStateError",
    "RetryExhaustedError",
    "ShipmentRequest",
    "ShipmentOptions",
    "RateResult",
    "LabelResult",
    "ShippingManager",
]
