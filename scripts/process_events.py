#!/usr/bin/env python3
"""
Process pending events from the event store.
Meant to be run on a schedule (cron, timer trigger) or with --loop.
"""
import argparse
import logging
import os
import sys
import time

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app.core.config import settings
from app.core.exceptions import StorageFailure
from app.db.session import session_scope
from app.services.event_handlers import build_default_consumer
from app.services.event_store import EventStore

logger = logging.getLogger("process_events")


def process_events(max_attempts: int, limit: int, consumer_id: str = None, drain: bool = False):
    """Run one batch, or keep claiming batches until none are left when drain is set"""
    totals = {"claimed": 0, "succeeded": 0, "failed": 0}
    with session_scope() as db:
        store = EventStore(db, max_attempts=max_attempts)
        consumer = build_default_consumer(store, consumer_id=consumer_id, batch_size=limit)
        while True:
            result = consumer.run_once()
            totals["claimed"] += result.claimed
            totals["succeeded"] += result.succeeded
            totals["failed"] += result.failed
            if not drain or result.claimed == 0:
                break
    return totals


def main(argv=None):
    parser = argparse.ArgumentParser(description="Process pending events from the event store")
    parser.add_argument("--max-attempts", type=int, default=settings.EVENT_MAX_ATTEMPTS)
    parser.add_argument("--limit", type=int, default=settings.EVENT_BATCH_SIZE)
    parser.add_argument("--consumer-id", default=None)
    parser.add_argument("--drain", action="store_true", help="Keep claiming batches until none are left")
    parser.add_argument("--loop", action="store_true", help="Run forever, sleeping --interval between runs")
    parser.add_argument("--interval", type=float, default=30.0)
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    while True:
        try:
            totals = process_events(args.max_attempts, args.limit, args.consumer_id, args.drain)
            print(f"✅ Claimed {totals['claimed']}: {totals['succeeded']} processed, {totals['failed']} failed")
        except StorageFailure as e:
            # Back off and retry on the next run
            print(f"❌ Storage failure: {e}")
            if not args.loop:
                return 1
        if not args.loop:
            return 0
        time.sleep(args.interval)


if __name__ == "__main__":
    sys.exit(main())
