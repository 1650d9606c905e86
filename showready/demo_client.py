#!/usr/bin/env python3
"""
Show-Ready Checkout demo driver (async)

Walks a running server through the sales-demo script the same way the page's
buttons do, using the JSON envelope instead of redirects:
  1) POST /admin/reset
  2) POST /checkout            (N times)
  3) POST /admin/replay        (N times; each one double-counts on purpose)
  4) POST /admin/refund        (optional)
  5) POST /admin/toggle-mode   (optional)

Every step records the notice, mode and counters from the envelope and the
run ends with a summary.

Usage:
  python -m showready.demo_client --base http://localhost:3000 \
                                  --checkouts 3 --replays 1 --toggle
"""

import argparse
import asyncio
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

ACCEPT_JSON = {"Accept": "application/json"}


@dataclass
class Step:
    action: str
    mode: str
    notice_kind: Optional[str]
    notice_text: Optional[str]
    purchases: int
    refunds: int
    orders: int
    t_s: float = 0.0


@dataclass
class Walkthrough:
    steps: List[Step] = field(default_factory=list)
    db: Dict[str, Any] = field(default_factory=dict)

    def add(self, action: str, envelope: Dict[str, Any], t_s: float) -> Step:
        db = envelope.get("db") or {}
        stats = db.get("stats") or {}
        note = envelope.get("notice") or {}
        step = Step(
            action=action,
            mode=envelope.get("mode", "?"),
            notice_kind=note.get("kind"),
            notice_text=note.get("text"),
            purchases=int(stats.get("purchases", 0)),
            refunds=int(stats.get("refunds", 0)),
            orders=len(db.get("orders") or []),
            t_s=t_s,
        )
        self.steps.append(step)
        self.db = db
        return step

    def summary(self) -> Dict[str, Any]:
        statuses = Counter(o.get("status") for o in self.db.get("orders", []))
        stats = self.db.get("stats") or {}
        return {
            "steps": len(self.steps),
            "orders": sum(statuses.values()),
            "pending": statuses.get("pending", 0),
            "paid": statuses.get("paid", 0),
            "refunded": statuses.get("refunded", 0),
            "purchases": int(stats.get("purchases", 0)),
            "refunds": int(stats.get("refunds", 0)),
            "mode": self.steps[-1].mode if self.steps else "?",
        }

    def print(self, elapsed_s: float):
        print(f"{'action':<20} {'mode':<5} {'orders':>6} {'buys':>5} "
              f"{'refunds':>7}  notice")
        for s in self.steps:
            text = s.notice_text or "-"
            print(f"{s.action:<20} {s.mode:<5} {s.orders:>6} "
                  f"{s.purchases:>5} {s.refunds:>7}  {text}")

        x = self.summary()
        print("\n=== Demo Summary ===")
        print(
            f"Orders: {x['orders']}   PENDING: {x['pending']}   "
            f"PAID: {x['paid']}   REFUNDED: {x['refunded']}"
        )
        print(
            f"Stats: purchases {x['purchases']}   refunds {x['refunds']}   "
            f"Mode: {x['mode']}"
        )
        print(f"Wall time: {elapsed_s:.3f}s")


async def post_action(
    client: httpx.AsyncClient, base: str, path: str
) -> Dict[str, Any]:
    resp = await client.post(f"{base}{path}", headers=ACCEPT_JSON,
                             timeout=10.0)
    resp.raise_for_status()
    return resp.json()


async def run_demo(
    client: httpx.AsyncClient,
    base: str,
    checkouts: int = 1,
    replays: int = 1,
    refund: bool = True,
    toggle: bool = False,
) -> Walkthrough:
    walk = Walkthrough()
    plan = (
        ["/admin/reset"]
        + ["/checkout"] * checkouts
        + ["/admin/replay"] * replays
        + (["/admin/refund"] if refund else [])
        + (["/admin/toggle-mode"] if toggle else [])
    )
    for path in plan:
        t0 = time.perf_counter()
        envelope = await post_action(client, base, path)
        walk.add(path, envelope, time.perf_counter() - t0)
    return walk


async def _run(args) -> Walkthrough:
    async with httpx.AsyncClient(
        headers={"User-Agent": "ShowReadyDemo/1.0"}
    ) as client:
        return await run_demo(
            client,
            args.base.rstrip("/"),
            checkouts=args.checkouts,
            replays=args.replays,
            refund=args.refund,
            toggle=args.toggle,
        )


def main():
    ap = argparse.ArgumentParser(description="Show-Ready Checkout demo driver")
    ap.add_argument("--base", default="http://localhost:3000",
                    help="Base URL of the app")
    ap.add_argument("--checkouts", type=int, default=1,
                    help="Number of checkouts to run")
    ap.add_argument("--replays", type=int, default=1,
                    help="Number of Golden Replays after the checkouts")
    ap.add_argument("--refund", action=argparse.BooleanOptionalAction,
                    default=True, help="Simulate a refund at the end")
    ap.add_argument("--toggle", action="store_true",
                    help="Flip SAFE/LIVE mode as the last step")
    args = ap.parse_args()

    t_start = time.perf_counter()
    walk = asyncio.run(_run(args))
    walk.print(time.perf_counter() - t_start)


if __name__ == "__main__":
    main()
