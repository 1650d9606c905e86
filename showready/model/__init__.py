from .order import (
    PAID, PENDING, REFUNDED, Order, State, Stats, User,
    empty_state, seed_state,
)
from .store import LastEventStore, StateStore

__all__ = [
    "PAID", "PENDING", "REFUNDED",
    "Order", "State", "Stats", "User",
    "empty_state", "seed_state",
    "LastEventStore", "StateStore",
]
