from typing import List, Optional, TypedDict

from ..config import DEMO_AMOUNT, DEMO_CURRENCY, DEMO_ITEM
from ..helpers import new_order_id


# pending -> paid -> refunded
PENDING = "pending"
PAID = "paid"
REFUNDED = "refunded"


# ----------------------------
# Document shapes
# ----------------------------
class Order(TypedDict):
    id: str
    item: str
    amount: int  # cents
    currency: str
    status: str


class User(TypedDict):
    id: str
    email: str


class Stats(TypedDict):
    purchases: int
    refunds: int


class State(TypedDict):
    orders: List[Order]
    users: List[User]
    stats: Stats


DEMO_USER: User = {"id": "u_demo", "email": "demo@example.com"}


def empty_state() -> State:
    return {"orders": [], "users": [], "stats": {"purchases": 0, "refunds": 0}}


def seed_state() -> State:
    state = empty_state()
    state["users"].append(dict(DEMO_USER))
    return state


def new_order(state: State) -> Order:
    # ids are short, so re-roll on the (rare) collision
    taken = {o["id"] for o in state["orders"]}
    oid = new_order_id()
    while oid in taken:
        oid = new_order_id()
    return {
        "id": oid,
        "item": DEMO_ITEM,
        "amount": DEMO_AMOUNT,
        "currency": DEMO_CURRENCY,
        "status": PENDING,
    }


def find_order(state: State, order_id: Optional[str]) -> Optional[Order]:
    if not order_id:
        return None
    for order in state["orders"]:
        if order.get("id") == order_id:
            return order
    return None


def last_paid_order(state: State) -> Optional[Order]:
    for order in reversed(state["orders"]):
        if order.get("status") == PAID:
            return order
    return None
