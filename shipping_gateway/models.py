"""
Data models for the Shipping Gateway.
Defines shipment requests, quote results and issued labels.

Label issuance flow (Melhor Envio):
1. Add the shipment to the cart
2. Checkout the cart item into an order
3. Check the order status
4. Request label generation
5. Request the printable label
6. Re-fetch the order to pick up the tracking code
"""

from typing import Any, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


MIN_WEIGHT_KG = 0.001


class ShipmentOptions(BaseModel):
    """
    Carrier-specific options for a shipment.

    Unknown keys are rejected so a misspelled option fails loudly instead of
    being silently ignored by the carrier.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    # Cart
    service_id: Optional[Union[int, str]] = None
    sender: Optional[dict[str, Any]] = Field(default=None, alias="from")
    recipient: Optional[dict[str, Any]] = Field(default=None, alias="to")
    volumes: Optional[list[dict[str, Any]]] = None
    agency: Optional[int] = None

    # Shared by quote and cart; insurance_value defaults to the declared value
    order_options: dict[str, Any] = Field(default_factory=dict, alias="options")

    # Quote filter; products replace the generic package description
    services: Optional[Union[str, list[Any]]] = None
    products: Optional[list[dict[str, Any]]] = None

    # Print
    print_mode: str = "public"


class ShipmentRequest(BaseModel):
    """A shipment to quote or to issue a label for."""

    model_config = ConfigDict(frozen=True)

    origin_postal_code: str
    destination_postal_code: str
    weight_kg: float = Field(gt=0)
    length_cm: float = Field(gt=0)
    width_cm: float = Field(gt=0)
    height_cm: float = Field(gt=0)
    declared_value: float = Field(default=0.0, ge=0)
    options: ShipmentOptions = Field(default_factory=ShipmentOptions)

    @property
    def wire_weight_kg(self) -> float:
        """Weight as sent in quote payloads, never below one gram."""
        return max(MIN_WEIGHT_KG, round(self.weight_kg, 3))

    @property
    def weight_grams(self) -> int:
        return max(1, int(round(self.weight_kg * 1000)))

    def wire_dimensions(self) -> dict[str, int]:
        """Dimensions rounded to whole centimetres."""
        return {
            "height": int(round(self.height_cm)),
            "width": int(round(self.width_cm)),
            "length": int(round(self.length_cm)),
        }


class RateResult(BaseModel):
    """A single freight offer returned by a carrier."""

    model_config = ConfigDict(frozen=True)

    provider: str
    service: str = Field(min_length=1)
    price: float = Field(ge=0)
    estimated_days: Optional[int] = None

    # Offer exactly as the carrier returned it
    raw: dict[str, Any] = Field(default_factory=dict)


class LabelResult(BaseModel):
    """Outcome of a completed label issuance."""

    model_config = ConfigDict(frozen=True)

    provider: str
    tracking_code: str = ""

    # Inline label data; None when the label is only served by URL
    label_content: Optional[Any] = None

    # cart_item, purchase, order, label, label_url
    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def label_url(self) -> Optional[str]:
        return self.raw.get("label_url")
