"""
Stages and per-stage results of the label workflow.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Optional


class WorkflowStage(str, Enum):
    """Stages of a label issuance, in execution order."""

    CART_ADD = "cart_add"
    CHECKOUT = "checkout"
    STATUS_GATE = "status_gate"
    GENERATE = "generate"
    PRINT = "print"
    RECONCILE = "reconcile"
    COMPLETED = "completed"


# Orders in these statuses can never be generated or printed
INVALID_ORDER_STATUSES = frozenset({"canceled", "expired", "suspended"})


@dataclass(frozen=True)
class CartItem:
    """Shipment staged in the carrier cart."""

    id: str
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Checkout:
    """Purchase created from the cart item."""

    purchase: dict[str, Any]
    order: dict[str, Any]

    @property
    def order_id(self) -> str:
        return str(self.order["id"])

    @property
    def status(self) -> Optional[str]:
        return self.order.get("status")


@dataclass(frozen=True)
class GenerationConfirmation:
    """Carrier acknowledgement that label generation was queued."""

    order_id: str
    message: Optional[str] = None
    generate_key: Optional[str] = None


@dataclass(frozen=True)
class PrintedLabel:
    """Printable label reference returned by the print endpoint."""

    raw: dict[str, Any]

    @property
    def url(self) -> Optional[str]:
        return self.raw.get("url") or None

    @property
    def content(self) -> Optional[Any]:
        return self.raw.get("data") or None


@dataclass(frozen=True)
class ReconciledOrder:
    """Order as re-fetched after printing."""

    order_id: str
    raw: dict[str, Any]
    degraded: bool = False

    @property
    def tracking_code(self) -> Optional[str]:
        return extract_tracking_code(self.raw)


def extract_tracking_code(order: dict[str, Any]) -> Optional[str]:
    """
    Tracking code of an order record.

    The carrier exposes it either as a plain string or as an object with a
    "code" member; any other shape means no tracking code yet.
    """
    tracking = order.get("tracking")

    if isinstance(tracking, str):
        return tracking

    if isinstance(tracking, dict) and isinstance(tracking.get("code"), str):
        return tracking["code"]

    return None


@dataclass
class WorkflowState:
    """Outputs threaded through one workflow run."""

    stage: WorkflowStage = WorkflowStage.CART_ADD
    cart_item: Optional[CartItem] = None
    checkout: Optional[Checkout] = None
    confirmation: Optional[GenerationConfirmation] = None
    label: Optional[PrintedLabel] = None
    order: Optional[ReconciledOrder] = None

    def advance(self, stage: WorkflowStage):
        self.stage = stage
