import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, TypedDict

from .helpers import now_ms
from .model.order import PAID, REFUNDED, Order, State, find_order
from .model.store import StateStore

log = logging.getLogger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
CHARGE_REFUNDED = "charge.refunded"

# event type -> (new order status, stats counter to bump)
TRANSITIONS = {
    PAYMENT_SUCCEEDED: (PAID, "purchases"),
    CHARGE_REFUNDED: (REFUNDED, "refunds"),
}


class EventData(TypedDict):
    orderId: str
    amount: int
    currency: str
    created: int  # ms since epoch


class Event(TypedDict):
    type: str
    data: EventData


@dataclass(frozen=True)
class Outcome:
    applied: bool
    event_type: Optional[str]
    order_id: Optional[str]
    reason: str = ""

    @property
    def label(self) -> str:
        # what the UI reports back for replay/refund
        return self.event_type if self.applied and self.event_type else "none"


# ----------------------------
# Payment Adapter Interface
# ----------------------------
class PaymentAdapter(ABC):
    @abstractmethod
    def build_event(self, kind: str, order: Order) -> Event: ...

    @abstractmethod
    def event_kind(self, event: Dict[str, Any]) -> Optional[str]: ...

    @abstractmethod
    def event_order_id(self, event: Dict[str, Any]) -> Optional[str]: ...


# ----------------------------
# MockPay implementation
# ----------------------------
class MockPay(PaymentAdapter):

    def build_event(self, kind: str, order: Order) -> Event:
        return {
            "type": kind,
            "data": {
                "orderId": order["id"],
                "amount": order["amount"],
                "currency": order["currency"],
                "created": now_ms(),
            },
        }

    def event_kind(self, event: Dict[str, Any]) -> Optional[str]:
        kind = event.get("type")
        return kind if isinstance(kind, str) else None

    def event_order_id(self, event: Dict[str, Any]) -> Optional[str]:
        data = event.get("data")
        if not isinstance(data, dict):
            return None
        oid = data.get("orderId")
        return oid if isinstance(oid, str) else None


def apply_event(
        adapter: PaymentAdapter, state: State, event: Any
) -> Outcome:
    """
    Apply one provider event to ``state`` in place.

    There is no duplicate detection: the same event applied twice moves the
    counters twice.
    """
    if not isinstance(event, dict):
        return Outcome(False, None, None, "event is not an object")

    kind = adapter.event_kind(event)
    order_id = adapter.event_order_id(event)
    if kind not in TRANSITIONS:
        return Outcome(False, kind, order_id, "unknown event type")

    order = find_order(state, order_id)
    if order is None:
        return Outcome(False, kind, order_id, "order not found")

    status, counter = TRANSITIONS[kind]
    order["status"] = status
    state["stats"][counter] += 1
    return Outcome(True, kind, order_id)


def simulate_webhook(
        adapter: PaymentAdapter, store: StateStore, event: Any
) -> Outcome:
    with store.transaction() as state:
        outcome = apply_event(adapter, state, event)

    if not outcome.applied:
        log.debug("webhook no-op (%s): type=%s order=%s",
                  outcome.reason, outcome.event_type, outcome.order_id)
    elif outcome.event_type == PAYMENT_SUCCEEDED:
        log.info("Payment captured for %s", outcome.order_id)
    else:
        log.info("Refunded %s", outcome.order_id)
    return outcome
