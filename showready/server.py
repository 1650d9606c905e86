from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Literal, Optional, TypedDict
from urllib.parse import urlencode

import orjson
import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.responses import HTMLResponse, ORJSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool
from starlette.status import HTTP_303_SEE_OTHER

from .config import (
    DEMO_AMOUNT, DEMO_CURRENCY, DEMO_ITEM, SITE_NAME, RuntimeMode, Settings
)
from .helpers import format_amount, to_iso
from .logging_config import configure_logging
from .mockpay import (
    CHARGE_REFUNDED, PAYMENT_SUCCEEDED, MockPay, Outcome, PaymentAdapter,
    simulate_webhook,
)
from .model.order import empty_state, last_paid_order, new_order
from .model.store import LastEventStore, StateStore

log = logging.getLogger(__name__)

HERE = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(HERE / "templates"))

adapter: PaymentAdapter = MockPay()

router = APIRouter()


class Notice(TypedDict):
    kind: Literal["ok", "warn"]
    text: str


class LastEventView(TypedDict):
    type: Optional[str]
    at: Optional[str]


def notice(kind: Literal["ok", "warn"], text: str) -> Notice:
    return {"kind": kind, "text": text}


def replay_notice(
    replayed: Optional[str], noop: Optional[str] = None
) -> Optional[Notice]:
    """
    Banner for the replay/refund result. The plain-form page rebuilds it from
    ``?replayed=<event type>|none[&noop=<reason>]``, the JSON envelope gets it
    directly, so both paths say the same thing.
    """
    if not replayed:
        return None
    if replayed == "none":
        return notice("warn", "Nothing to replay.")
    if noop:
        return notice("warn", f"Last event {replayed} changed nothing "
                              f"({noop}).")
    return notice("ok", f"Replayed {replayed}.")


def last_event_view(event: Any) -> Optional[LastEventView]:
    if not isinstance(event, dict):
        return None
    data = event.get("data")
    created = data.get("created") if isinstance(data, dict) else None
    kind = event.get("type")
    return {
        "type": kind if isinstance(kind, str) else None,
        "at": to_iso(created) if isinstance(created, int) else None,
    }


# ----------------------------
# Dependencies
# ----------------------------
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> StateStore:
    return request.app.state.store


def get_last_event(request: Request) -> LastEventStore:
    return request.app.state.last_event


def get_mode(request: Request) -> RuntimeMode:
    return request.app.state.mode


# ----------------------------
# Response shapes
# ----------------------------
def wants_json(request: Request) -> bool:
    return "application/json" in request.headers.get("accept", "").lower()


def respond(
    request: Request,
    store: StateStore,
    last: LastEventStore,
    mode: RuntimeMode,
    note: Optional[Notice],
    redirect_to: str = "/",
):
    """Envelope for fetch() callers, 303 back to the page for plain forms."""
    if wants_json(request):
        return ORJSONResponse({
            "ok": True,
            "db": store.read(),
            "notice": note,
            "mode": mode.label,
            "last_event": last_event_view(last.read()),
        })
    return RedirectResponse(url=redirect_to, status_code=HTTP_303_SEE_OTHER)


def replayed_url(outcome: Optional[Outcome]) -> str:
    if outcome is None or not outcome.event_type:
        return "/?replayed=none"
    query = {"replayed": outcome.event_type}
    if not outcome.applied:
        query["noop"] = outcome.reason
    return "/?" + urlencode(query)


def outcome_notice(outcome: Optional[Outcome]) -> Optional[Notice]:
    if outcome is None or not outcome.event_type:
        return replay_notice("none")
    return replay_notice(outcome.event_type,
                         None if outcome.applied else outcome.reason)


# ----------------------------
# Page
# ----------------------------
# File-bound handlers are plain ``def``: FastAPI runs them in its threadpool
# and the store lock is what keeps read-modify-write cycles apart.
@router.get("/", response_class=HTMLResponse)
def home_page(
    request: Request,
    replayed: Optional[str] = None,
    noop: Optional[str] = None,
    store: StateStore = Depends(get_store),
    last: LastEventStore = Depends(get_last_event),
    mode: RuntimeMode = Depends(get_mode),
):
    state = store.read()
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "site_name": SITE_NAME,
            "item": DEMO_ITEM,
            "price": format_amount(DEMO_AMOUNT, DEMO_CURRENCY),
            "mode": mode.label,
            "notice": replay_notice(replayed, noop),
            "state_json": orjson.dumps(
                state, option=orjson.OPT_INDENT_2
            ).decode(),
            "last_event": last_event_view(last.read()),
        },
    )


# ----------------------------
# Checkout: create order, pretend to charge, fire the webhook
# ----------------------------
@router.post("/checkout")
def checkout(
    request: Request,
    store: StateStore = Depends(get_store),
    last: LastEventStore = Depends(get_last_event),
    mode: RuntimeMode = Depends(get_mode),
):
    with store.transaction() as state:
        order = new_order(state)
        state["orders"].append(order)

    event = adapter.build_event(PAYMENT_SUCCEEDED, order)
    last.write(event)
    simulate_webhook(adapter, store, event)
    log.info("Checkout %s (%s mode)", order["id"], mode.label)

    return respond(request, store, last, mode,
                   notice("ok", f"Payment captured for {order['id']}."))


# ----------------------------
# Webhook endpoint (parity with a real provider; no signature check)
# ----------------------------
@router.post("/webhook")
async def webhook(
    request: Request,
    store: StateStore = Depends(get_store),
):
    payload = await request.body()
    try:
        event = orjson.loads(payload)
    except orjson.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Invalid JSON")

    outcome = await run_in_threadpool(simulate_webhook, adapter, store, event)
    return {"ok": True, "applied": outcome.applied}


# ----------------------------
# Admin actions
# ----------------------------
@router.post("/admin/reset")
def admin_reset(
    request: Request,
    settings: Settings = Depends(get_settings),
    store: StateStore = Depends(get_store),
    last: LastEventStore = Depends(get_last_event),
    mode: RuntimeMode = Depends(get_mode),
):
    state = empty_state()
    if settings.seed_on_reset:
        # leave something behind for Golden Replay to act on
        order = new_order(state)
        state["orders"].append(order)
        store.write(state)
        last.write(adapter.build_event(PAYMENT_SUCCEEDED, order))
        log.info("DB reset, seeded pending order %s.", order["id"])
        note = notice("ok", f"State reset. Seeded pending order {order['id']}.")
    else:
        store.write(state)
        last.clear()
        log.info("DB reset.")
        note = notice("ok", "State reset.")

    return respond(request, store, last, mode, note)


@router.post("/admin/replay")
def admin_replay(
    request: Request,
    store: StateStore = Depends(get_store),
    last: LastEventStore = Depends(get_last_event),
    mode: RuntimeMode = Depends(get_mode),
):
    event = last.read()
    outcome = None
    if event is None:
        log.info("No last event to replay.")
    else:
        outcome = simulate_webhook(adapter, store, event)
        if outcome.applied:
            log.info("Replayed last webhook event: %s (%s mode)",
                     outcome.event_type, mode.label)
        else:
            log.info("Last event %s changed nothing: %s",
                     outcome.event_type, outcome.reason)

    return respond(request, store, last, mode, outcome_notice(outcome),
                   replayed_url(outcome))


@router.post("/admin/refund")
def admin_refund(
    request: Request,
    store: StateStore = Depends(get_store),
    last: LastEventStore = Depends(get_last_event),
    mode: RuntimeMode = Depends(get_mode),
):
    order = last_paid_order(store.read())
    outcome = None
    if order is None:
        log.info("No paid order to refund.")
        note = notice("warn", "No paid order to refund.")
    else:
        event = adapter.build_event(CHARGE_REFUNDED, order)
        last.write(event)
        outcome = simulate_webhook(adapter, store, event)
        log.info("Simulated refund for %s (%s mode)", order["id"], mode.label)
        note = notice("ok", f"Refunded {order['id']}.")

    return respond(request, store, last, mode, note, replayed_url(outcome))


@router.post("/admin/toggle-mode")
def admin_toggle_mode(
    request: Request,
    store: StateStore = Depends(get_store),
    last: LastEventStore = Depends(get_last_event),
    mode: RuntimeMode = Depends(get_mode),
):
    label = mode.toggle()
    log.info("Mode switched to %s.", label)
    return respond(request, store, last, mode,
                   notice("ok", f"{label} mode on."))


# ----------------------------
# App factory
# ----------------------------
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        print('=' * 50)
        print(f'{SITE_NAME} is starting up...')
        print(f'   - Mode:      {app.state.mode.label}')
        print(f'   - Data dir:  {settings.data_dir}')
        print(f'   - Seed on reset: {settings.seed_on_reset}')
        print('=' * 50)
        yield

    app = FastAPI(
        title=SITE_NAME,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.mode = RuntimeMode(safe=settings.safe_mode)
    app.state.store = StateStore(settings.db_file)
    app.state.last_event = LastEventStore(settings.last_event_file)

    app.mount("/static", StaticFiles(directory=str(HERE / "static")),
              name="static")
    app.include_router(router)
    return app


app = create_app()


def main() -> None:
    settings = Settings.from_env()
    print(f"{SITE_NAME} running on http://{settings.host}:{settings.port}"
          f"  (SAFE_MODE={settings.safe_mode})")
    uvicorn.run("showready.server:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
