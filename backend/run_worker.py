from __future__ import annotations
import argparse
import logging
import time

from app.core.config import settings
from app.core.logging import configure_logging
from app.db.init_db import init_db
from app.services.recompute_worker import RecomputationWorker
from app.services.signals import WebhookSignalSink

logger = logging.getLogger("run_worker")


def main() -> None:
    parser = argparse.ArgumentParser(description="Recomputation queue worker")
    parser.add_argument("--burst", action="store_true", help="drain the queue and exit")
    parser.add_argument("--interval", type=float, default=settings.queue_interval_seconds)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else settings.log_level)
    init_db()
    worker = RecomputationWorker(listeners=[WebhookSignalSink(settings.signal_webhook_url)])

    if args.burst:
        results = worker.drain()
        logger.info(f"burst finished: {sum(r.claimed for r in results)} tasks claimed in {len(results)} batches")
        return

    worker.start_queue_processor(args.interval)
    try:
        while worker.is_processor_running:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("interrupted")
    finally:
        worker.stop_queue_processor(timeout=30)


if __name__ == "__main__":
    main()
