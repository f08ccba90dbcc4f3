"""
Label issuance workflow for Melhor Envio.

The carrier issues labels through a cart-based checkout. Each stage needs the
output of the previous one, so stages run strictly in order:

    cart_add -> checkout -> status_gate -> generate -> print -> reconcile

Print and reconcile are retried with a fixed delay. Exhausting print is fatal;
exhausting reconcile degrades the result to an order without tracking code.
"""

import asyncio
from typing import Any, Optional

from shipping_gateway.config import MelhorEnvioConfig
from shipping_gateway.errors import (
    ShippingError,
    ConfigurationError,
    TransportError,
    HttpStatusError,
    ProtocolError,
    BusinessStateError,
    RetryExhaustedError,
)
from shipping_gateway.logging_config import WorkflowLogger
from shipping_gateway.models import ShipmentRequest, LabelResult
from shipping_gateway.retry import RetryPolicy, Sleep
from shipping_gateway.transport import HttpClient
from shipping_gateway.workflow.stages import (
    WorkflowStage,
    WorkflowState,
    INVALID_ORDER_STATUSES,
    CartItem,
    Checkout,
    GenerationConfirmation,
    PrintedLabel,
    ReconciledOrder,
)


CART_PATH = "me/cart"
CHECKOUT_PATH = "me/shipment/checkout"
GENERATE_PATH = "me/shipment/generate"
PRINT_PATH = "me/shipment/print"
ORDER_PATH = "me/orders/{order_id}"


class LabelWorkflow:
    """
    Runs the six-stage label issuance against one carrier account.

    A workflow object holds no per-run state; every call to run() threads its
    own WorkflowState, so concurrent runs on the same instance are independent.
    """

    def __init__(
        self,
        http: HttpClient,
        config: MelhorEnvioConfig,
        provider: str = "melhor_envio",
        sleep: Sleep = asyncio.sleep,
    ):
        self.http = http
        self.config = config
        self.provider = provider
        self.sleep = sleep
        self.retry_policy = RetryPolicy(
            max_attempts=config.max_retry_attempts,
            delay=config.retry_delay_seconds,
            sleep=sleep,
        )

    async def run(self, request: ShipmentRequest) -> LabelResult:
        """Issue a label for the shipment, performing every remote step."""
        log = WorkflowLogger(self.provider)
        state = WorkflowState()

        try:
            state.cart_item = await self.add_to_cart(request, log)

            state.advance(WorkflowStage.CHECKOUT)
            state.checkout = await self.checkout(state.cart_item, log)

            state.advance(WorkflowStage.STATUS_GATE)
            self.ensure_processable(state.checkout, log)

            state.advance(WorkflowStage.GENERATE)
            state.confirmation = await self.generate(state.checkout, log)

            state.advance(WorkflowStage.PRINT)
            state.label = await self.print_label(
                state.checkout.order_id, request.options.print_mode, log
            )

            state.advance(WorkflowStage.RECONCILE)
            state.order = await self.reconcile(state.checkout.order_id, log)

        except ShippingError as e:
            log.error(f"Label workflow failed at {state.stage.value}: {e}")
            raise

        state.advance(WorkflowStage.COMPLETED)
        result = self.build_result(state)

        log.info(
            f"Label issued for order {state.checkout.order_id} "
            f"(tracking: {result.tracking_code or 'pending'})"
        )
        return result

    # ===== Stages =====

    def build_cart_item(self, request: ShipmentRequest) -> dict[str, Any]:
        """Cart payload for a shipment; raises ConfigurationError if incomplete."""
        options = request.options
        stage = WorkflowStage.CART_ADD.value

        if options.service_id is None:
            raise ConfigurationError(
                "service_id is required to add a shipment to the cart", stage=stage
            )

        if not isinstance(options.sender, dict) or not isinstance(options.recipient, dict):
            raise ConfigurationError(
                "Both 'from' and 'to' address objects are required", stage=stage
            )

        volumes = options.volumes
        if volumes is None:
            volumes = [{"weight": request.weight_grams, **request.wire_dimensions()}]

        order_options = dict(options.order_options)
        order_options.setdefault("insurance_value", request.declared_value)

        cart_item: dict[str, Any] = {
            "service": options.service_id,
            "from": options.sender,
            "to": options.recipient,
            "volumes": volumes,
            "options": order_options,
        }

        if isinstance(options.products, list):
            cart_item["products"] = options.products

        if isinstance(options.agency, int):
            cart_item["agency"] = options.agency

        return cart_item

    async def add_to_cart(
        self, request: ShipmentRequest, log: Optional[WorkflowLogger] = None
    ) -> CartItem:
        log = log or WorkflowLogger(self.provider)
        stage = WorkflowStage.CART_ADD

        cart_item = self.build_cart_item(request)
        decoded = await self._exchange("POST", CART_PATH, stage, "Adding shipment to cart", cart_item)

        if not isinstance(decoded, dict) or decoded.get("id") is None:
            raise ProtocolError(
                "Cart response has no item id", stage=stage.value, payload=decoded
            )

        item = CartItem(id=str(decoded["id"]), raw=decoded)
        log.info(f"Shipment added to cart as {item.id}")
        return item

    async def checkout(
        self, cart_item: CartItem, log: Optional[WorkflowLogger] = None
    ) -> Checkout:
        log = log or WorkflowLogger(self.provider)
        stage = WorkflowStage.CHECKOUT

        decoded = await self._exchange(
            "POST", CHECKOUT_PATH, stage, "Checkout", {"orders": [cart_item.id]}
        )

        purchase = decoded.get("purchase") if isinstance(decoded, dict) else None
        if not isinstance(purchase, dict):
            raise ProtocolError(
                "Checkout response has no purchase", stage=stage.value, payload=decoded
            )

        orders = purchase.get("orders")
        if not isinstance(orders, list) or not orders:
            raise ProtocolError(
                "Checkout purchase has no orders", stage=stage.value, payload=decoded
            )

        order = orders[0]
        if not isinstance(order, dict) or order.get("id") is None:
            raise ProtocolError(
                "Checkout order has no id", stage=stage.value, payload=decoded
            )

        status = order.get("status")
        if status is not None and not isinstance(status, str):
            raise ProtocolError(
                "Checkout order status is not a string", stage=stage.value, payload=decoded
            )

        result = Checkout(purchase=decoded, order=order)
        log.info(f"Checkout completed: order {result.order_id} ({result.status})")
        return result

    def ensure_processable(
        self, checkout: Checkout, log: Optional[WorkflowLogger] = None
    ):
        """Reject orders the carrier will never generate a label for."""
        status = checkout.status

        if status in INVALID_ORDER_STATUSES:
            raise BusinessStateError(
                f"Order {checkout.order_id} is '{status}' and cannot be processed",
                status=status,
                stage=WorkflowStage.STATUS_GATE.value,
            )

        if log:
            log.debug(f"Order {checkout.order_id} status '{status}' accepted")

    async def generate(
        self, checkout: Checkout, log: Optional[WorkflowLogger] = None
    ) -> GenerationConfirmation:
        """
        Queue label generation.

        The carrier confirms asynchronously with {order_id: {status, message}}.
        The order is printable once checkout completed, so there is nothing to
        poll for here.
        """
        log = log or WorkflowLogger(self.provider)
        stage = WorkflowStage.GENERATE
        order_id = checkout.order_id

        decoded = await self._exchange(
            "POST", GENERATE_PATH, stage, "Label generation", {"orders": [order_id]}
        )

        confirmation = decoded.get(order_id) if isinstance(decoded, dict) else None
        if not isinstance(confirmation, dict) or confirmation.get("status") is not True:
            raise ProtocolError(
                f"Label generation was not confirmed for order {order_id}",
                stage=stage.value,
                payload=decoded,
            )

        result = GenerationConfirmation(
            order_id=order_id,
            message=confirmation.get("message"),
            generate_key=decoded.get("generate_key"),
        )
        log.info(f"Label generation queued for order {order_id}: {result.message}")
        return result

    async def print_label(
        self,
        order_id: str,
        mode: str = "public",
        log: Optional[WorkflowLogger] = None,
    ) -> PrintedLabel:
        log = log or WorkflowLogger(self.provider)
        stage = WorkflowStage.PRINT
        payload = {"mode": mode, "orders": [order_id]}

        async def attempt_print(attempt: int) -> PrintedLabel:
            decoded = await self._exchange("POST", PRINT_PATH, stage, "Label print", payload)

            if not isinstance(decoded, dict) or not (decoded.get("url") or decoded.get("data")):
                raise ProtocolError(
                    "Print response has no label url or data",
                    stage=stage.value,
                    payload=decoded,
                )

            log.info(f"Label print ready for order {order_id} on attempt {attempt}")
            return PrintedLabel(raw=decoded)

        try:
            return await self.retry_policy.run(
                attempt_print,
                description=f"Printing label for order {order_id}",
                stage=stage.value,
                log=log,
            )
        except RetryExhaustedError as e:
            log.error(f"Giving up printing order {order_id} after {e.attempts} attempts")
            raise

    async def reconcile(
        self, order_id: str, log: Optional[WorkflowLogger] = None
    ) -> ReconciledOrder:
        """
        Re-fetch the order to pick up its tracking code.

        Never fails: when every attempt fails the order is reported with its
        id only.
        """
        log = log or WorkflowLogger(self.provider)
        stage = WorkflowStage.RECONCILE
        path = ORDER_PATH.format(order_id=order_id)

        delay = self.config.order_lookup_delay
        if delay > 0:
            log.info(f"Waiting {delay}s for order {order_id} to be processed")
            await self.sleep(delay)

        async def fetch_order(attempt: int) -> ReconciledOrder:
            decoded = await self._exchange("GET", path, stage, "Order lookup")

            if not isinstance(decoded, dict):
                raise ProtocolError(
                    "Order lookup returned a non-object body",
                    stage=stage.value,
                    payload=decoded,
                )

            order = ReconciledOrder(order_id=order_id, raw=decoded)
            log.info(
                f"Order {order_id} fetched on attempt {attempt} "
                f"(status: {decoded.get('status')}, tracking: {order.tracking_code})"
            )
            return order

        try:
            return await self.retry_policy.run(
                fetch_order,
                description=f"Fetching order {order_id}",
                stage=stage.value,
                log=log,
            )
        except RetryExhaustedError as e:
            log.warning(f"Order {order_id} could not be refreshed, continuing without tracking: {e}")
            return ReconciledOrder(order_id=order_id, raw={"id": order_id}, degraded=True)

    # ===== Result =====

    def build_result(self, state: WorkflowState) -> LabelResult:
        return LabelResult(
            provider=self.provider,
            tracking_code=state.order.tracking_code or "",
            label_content=state.label.content,
            raw={
                "cart_item": state.cart_item.id,
                "purchase": state.checkout.purchase,
                "order": state.order.raw,
                "label": state.label.raw,
                "label_url": state.label.url,
            },
        )

    async def _exchange(
        self,
        method: str,
        path: str,
        stage: WorkflowStage,
        description: str,
        payload: Any = None,
    ) -> Any:
        """One request/response, with failures tagged by stage."""
        try:
            response = await self.http.request(method, path, json=payload)
            return response.json()
        except HttpStatusError as e:
            raise HttpStatusError(
                f"{description} failed: {e}",
                status=e.status,
                body=e.body,
                stage=stage.value,
            ) from e
        except TransportError as e:
            raise TransportError(f"{description} failed: {e}", stage=stage.value) from e
        except ProtocolError as e:
            raise ProtocolError(
                f"{description} returned an invalid body: {e}",
                stage=stage.value,
                payload=e.payload,
            ) from e
