#!/usr/bin/env python3
"""
Close voting on decisions whose deadline has passed and mail the summaries.

Usage:
    python run_scheduler.py                 # Sweep every DEADLINE_CHECK_INTERVAL seconds
    python run_scheduler.py --once          # Single sweep, then exit
    python run_scheduler.py --interval 300  # Sweep every 5 minutes
    python run_scheduler.py --complete ID   # Close one decision now (manual completion)
    python run_scheduler.py --check ID      # Run the completion check for one decision
    python run_scheduler.py --resend ID     # Mail the summary again for a closed decision (add --force to skip checks)
    python run_scheduler.py --upcoming 48   # List decisions closing in the next 48 hours
"""

import argparse
import asyncio

from app.container import container
from app.errors import ConfigurationError, VotingError
from app.repositories import close_db
from mail_client import MailgunTransport
from settings import DEADLINE_CHECK_INTERVAL, LOG_LEVEL
from settings.logging import setup_logging

logger = setup_logging(level=LOG_LEVEL, to_file=True)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--once", action="store_true", help="run a single deadline sweep")
    mode.add_argument("--complete", metavar="ID", help="manually complete one decision")
    mode.add_argument("--check", metavar="ID", help="check one decision for completion")
    mode.add_argument("--resend", metavar="ID", help="send the voting summary again for one decision")
    mode.add_argument("--upcoming", metavar="HOURS", type=float, help="list deadlines in the next HOURS hours")
    parser.add_argument("--force", action="store_true", help="with --resend: skip the status and recent-send checks")
    parser.add_argument("--interval", type=float, default=DEADLINE_CHECK_INTERVAL, help="seconds between sweeps")
    parser.add_argument("--no-mail", action="store_true", help="close decisions without sending summaries")
    return parser.parse_args(argv)


async def _run(args: argparse.Namespace, transport: MailgunTransport | None) -> None:
    container.init(transport=transport, sweep_interval=args.interval)

    if args.complete:
        status = await container.detector.manually_complete(args.complete)
        logger.info("Manual completion: {}", status.to_dict())
    elif args.check:
        status = await container.detector.check_completion(args.check)
        logger.info("Completion check: {}", status.to_dict())
    elif args.resend:
        if container.summary is None:
            raise ConfigurationError("--resend needs mail delivery, drop --no-mail")
        report = await container.summary.resend(args.resend, force=args.force)
        logger.info("Resend: {}", report.summary())
    elif args.upcoming is not None:
        upcoming = container.scheduler.upcoming(args.upcoming)
        for item in upcoming:
            logger.info(
                "{} {} '{}' closes {:%Y-%m-%d %H:%M} ({}h)",
                item["kind"],
                item["id"],
                item["title"],
                item["deadline"],
                item["hours_remaining"],
            )
        logger.info("{} deadlines in the next {}h", len(upcoming), args.upcoming)
    elif args.once:
        closed = await container.scheduler.run_once(force=True)
        logger.info("Closed {} decisions: {}", len(closed), closed)
    else:
        await container.scheduler.run_forever()


async def main_async(args: argparse.Namespace) -> None:
    if args.no_mail:
        await _run(args, None)
        return
    async with MailgunTransport() as transport:
        await _run(args, transport)


def main():
    args = parse_args()
    try:
        asyncio.run(main_async(args))
    except ConfigurationError as e:
        logger.error("Configuration error: {} (use --no-mail to run without sending)", e.message)
        raise SystemExit(2) from e
    except VotingError as e:
        logger.error("{}", e.message)
        raise SystemExit(1) from e
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        close_db()


if __name__ == "__main__":
    main()
