"""
Carrier drivers.
Quote and label integrations for Melhor Envio and Correios.
"""

from shipping_gateway.drivers.base import ShippingDriver
from shipping_gateway.drivers.melhor_envio import MelhorEnvioDriver
from shipping_gateway.drivers.correios import CorreiosDriver

__all__ = ["ShippingDriver", "MelhorEnvioDriver", "CorreiosDriver"]
