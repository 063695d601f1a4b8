"""Bulk vendor poller for the dispatcher.

Claims READY bulk payloads for the configured vendor, hands them to the
vendor adapter and records the outcomes in the event log. Settings come from
the DISPATCHER_* environment variables.

Usage:
    python src/worker.py                 # Poll until interrupted
    python src/worker.py --once          # Process a single batch and exit
    python src/worker.py --interval 10   # Seconds to wait when the queue is empty
"""

import argparse
import asyncio

import structlog

logger = structlog.get_logger(__name__)


def build_workflow(settings):
    """Wire the bulk send workflow against the active store and vendor."""
    from dispatcher.bulk import get_vendor
    from dispatcher.bulk.store import BulkPayloadStore
    from dispatcher.bulk.workflow import BulkSendWorkflow
    from dispatcher.logevent.flush import LogFlushPipeline
    from dispatcher.store import get_store

    store = get_store()
    pipeline = LogFlushPipeline(store, settings)
    bulk_store = BulkPayloadStore(store, settings, pipeline)
    return BulkSendWorkflow(bulk_store, get_vendor(), pipeline)


async def run(once: bool, interval: float) -> int:
    from dispatcher.config import DispatcherSettings
    from dispatcher.domain import dispatcher

    dispatcher.init()
    settings = DispatcherSettings.from_env()

    processed = 0
    with dispatcher.domain_context():
        workflow = build_workflow(settings)
        while True:
            claimed = await workflow.run_once()
            processed += claimed
            if once:
                break
            if claimed == 0:
                await asyncio.sleep(interval)

    logger.info("Bulk poller stopped", processed=processed)
    return processed


def main():
    from dispatcher.utils.logging import configure_logging

    parser = argparse.ArgumentParser(description="Dispatcher bulk vendor poller")
    parser.add_argument("--once", action="store_true", help="Process a single batch and exit")
    parser.add_argument(
        "--interval",
        type=float,
        default=5.0,
        help="Seconds to wait before polling again when nothing is pending (default: 5)",
    )
    args = parser.parse_args()

    configure_logging()
    asyncio.run(run(args.once, args.interval))


if __name__ == "__main__":
    main()
