import pytest

from showready.mockpay import (
    CHARGE_REFUNDED, PAYMENT_SUCCEEDED, MockPay, Outcome, apply_event,
    simulate_webhook,
)
from showready.model.order import empty_state, new_order

adapter = MockPay()


@pytest.fixture
def state():
    s = empty_state()
    s["orders"].append(new_order(s))
    return s


def test_build_event_shape(state):
    order = state["orders"][0]
    event = adapter.build_event(PAYMENT_SUCCEEDED, order)

    assert event["type"] == PAYMENT_SUCCEEDED
    assert event["data"]["orderId"] == order["id"]
    assert event["data"]["amount"] == 4200
    assert event["data"]["currency"] == "usd"
    assert isinstance(event["data"]["created"], int)


def test_payment_succeeded_marks_paid(state):
    order = state["orders"][0]
    outcome = apply_event(
        adapter, state, adapter.build_event(PAYMENT_SUCCEEDED, order)
    )

    assert outcome == Outcome(True, PAYMENT_SUCCEEDED, order["id"])
    assert order["status"] == "paid"
    assert state["stats"] == {"purchases": 1, "refunds": 0}


def test_charge_refunded_marks_refunded(state):
    order = state["orders"][0]
    order["status"] = "paid"
    outcome = apply_event(
        adapter, state, adapter.build_event(CHARGE_REFUNDED, order)
    )

    assert outcome.applied
    assert order["status"] == "refunded"
    assert state["stats"] == {"purchases": 0, "refunds": 1}


def test_same_event_twice_counts_twice(state):
    event = adapter.build_event(PAYMENT_SUCCEEDED, state["orders"][0])
    apply_event(adapter, state, event)
    apply_event(adapter, state, event)

    assert state["stats"]["purchases"] == 2


@pytest.mark.parametrize("event, reason", [
    ({"type": "invoice.paid", "data": {"orderId": "x"}},
     "unknown event type"),
    ({"type": PAYMENT_SUCCEEDED, "data": {"orderId": "ord_nope00"}},
     "order not found"),
    ({"type": PAYMENT_SUCCEEDED}, "order not found"),
    (["not", "an", "object"], "event is not an object"),
])
def test_noops_leave_state_alone(state, event, reason):
    before = {"stats": dict(state["stats"]),
              "status": state["orders"][0]["status"]}
    outcome = apply_event(adapter, state, event)

    assert not outcome.applied
    assert outcome.reason == reason
    assert outcome.label == "none"
    assert state["stats"] == before["stats"]
    assert state["orders"][0]["status"] == before["status"]


def test_simulate_webhook_persists(store, state):
    store.write(state)
    order_id = state["orders"][0]["id"]

    outcome = simulate_webhook(
        adapter, store,
        {"type": PAYMENT_SUCCEEDED, "data": {"orderId": order_id}},
    )

    assert outcome.label == PAYMENT_SUCCEEDED
    saved = store.read()
    assert saved["orders"][0]["status"] == "paid"
    assert saved["stats"]["purchases"] == 1
