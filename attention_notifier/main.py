"""Command-line entry point running one notification check."""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from .config import load_config
from .models import CHECK_NOTIFICATIONS, Account, TriggerEvent
from .worker import create_worker

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )


async def run_once(args: argparse.Namespace) -> None:
    """Run a single trigger cycle for the given account."""
    config = load_config()
    worker = create_worker(config)

    if args.reset_state:
        logger.info("Clearing worker state...")
        await asyncio.to_thread(worker.state.store.clear)
        logger.info("Worker state cleared.")

    account = Account(id=args.account_id)
    if args.force:
        await worker.show_latest_attention_change_notification(account, force=True)
        return

    dispatcher = worker.init()
    event = dispatcher.dispatch(CHECK_NOTIFICATIONS, TriggerEvent(account=account))
    await event.settled()


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point with command-line argument parsing."""
    parser = argparse.ArgumentParser(
        description="Notify about changes that newly need your attention"
    )
    parser.add_argument(
        "--account-id",
        type=int,
        required=True,
        help="Numeric id of the account whose attention set is checked"
    )
    parser.add_argument(
        "--method",
        choices=["log", "sms", "email"],
        default=None,
        help="Notification method (default: from NOTIFICATION_METHOD env var or 'log')"
    )
    parser.add_argument(
        "--reset-state",
        action="store_true",
        help="Forget the last check time before running (every attention change counts as new)"
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Ignore the throttle interval for this run"
    )
    args = parser.parse_args(argv)

    configure_logging()

    if args.method:
        os.environ["NOTIFICATION_METHOD"] = args.method

    try:
        asyncio.run(run_once(args))
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Fatal error in run_once: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
