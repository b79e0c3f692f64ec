"""
Live Trade Feed Demo
====================
Runs the dashboard engine headless on an asyncio loop:
- synthetic trades arriving every 1-3 seconds into a 50-row buffer
- the trades table re-rendered to the terminal on every tick
- one position shared as a broadcast, persisted to the key-value store

Run:  python3 app.py --seconds 15
      python3 app.py --pg            # persist broadcasts in embedded PostgreSQL
"""

import argparse
import asyncio
import logging
import tempfile

from dashboard import Dashboard, DashboardConfig, SPOT
from feed.scheduler import AsyncioScheduler
from store.kv import InMemoryKeyValueStore


def _print_table(table, limit=8):
    widths = [max(len(h), 10) for h in table.headers]
    print("  ".join(h.ljust(w) for h, w in zip(table.headers, widths)))
    for row in table.texts()[:limit]:
        print("  ".join(t.ljust(w) for t, w in zip(row, widths)))
    print(f"  ... {len(table)} rows")
    print()


async def run(seconds, store):
    # ── 1. Engine on the running loop ───────────────────────────────────────
    dash = Dashboard(AsyncioScheduler(), store=store, config=DashboardConfig.from_env())
    dash.activate_feed()

    # ── 2. Watch the feed tick ──────────────────────────────────────────────
    for _ in range(int(seconds)):
        await asyncio.sleep(1)
        _print_table(dash.render_active())

    # ── 3. Share a position ─────────────────────────────────────────────────
    dash.views.select(SPOT)
    _print_table(dash.render_active())
    dash.share(SPOT, position_id=1)
    dash.dialog.edit_message("gm from the demo")
    dash.dialog.submit()
    print(f"  Dialog: {dash.dialog.state}  ({dash.dialog.counter})")
    await asyncio.sleep(dash.config.auto_close_delay + 0.1)
    print(f"  Dialog: {dash.dialog.state}")
    print(f"  Broadcasts stored: {len(dash.log)}")

    dash.shutdown()


def main():
    parser = argparse.ArgumentParser(description="Headless live trade feed demo")
    parser.add_argument("--seconds", type=float, default=10)
    parser.add_argument("--pg", action="store_true",
                        help="store broadcasts in an embedded PostgreSQL server")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.pg:
        from store.server import KVStoreServer
        with KVStoreServer(data_dir=tempfile.mkdtemp(prefix="feed_demo_")) as server:
            asyncio.run(run(args.seconds, server.app_store()))
    else:
        asyncio.run(run(args.seconds, InMemoryKeyValueStore()))


if __name__ == "__main__":
    main()
