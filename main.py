import json
import uuid
import logging
import signal
import argparse
import threading

from core.app_context import AppContext
from core.config_loader import load_config
from core.exceptions import ServiceException
from core.leaderboard.models import StandingsQuery, SCOPES
from main_driver.init_db import init_db

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Set on SIGINT/SIGTERM; batch runs stop between chunks
stop_event = threading.Event()


def signal_handler(sig, frame):
    logger.info("Shutdown signal received")
    stop_event.set()


def cmd_init_db(ctx: AppContext, args) -> int:
    init_db()
    return 0


def cmd_resolve_contest(ctx: AppContext, args) -> int:
    if args.recompute_reason:
        resolution = ctx.scheduler.recompute_contest(args.contest_id, args.recompute_reason, args.chunk_size)
    else:
        resolution = ctx.scheduler.resolve_contest(args.contest_id, args.chunk_size, stop_event)
    print(json.dumps(resolution.to_dict(), indent=2))
    return 0


def cmd_resolve_period(ctx: AppContext, args) -> int:
    summary = ctx.scheduler.run_period(
        args.week,
        args.season,
        chunk_size=args.chunk_size,
        source='cli',
        stop_event=stop_event
    )
    data = summary.to_dict()
    data.pop('resolutions')
    print(json.dumps(data, indent=2))
    return 0 if summary.success and not summary.interrupted else 1


def cmd_standings(ctx: AppContext, args) -> int:
    query = StandingsQuery(
        scope=args.scope,
        season=args.season,
        week=args.week,
        settlement_filter=frozenset(args.settlement) if args.settlement else None,
        limit=args.limit
    )
    snapshot = ctx.leaderboard_service.get_standings(query)
    if not snapshot.available:
        logger.error("Standings are unavailable")
        return 1
    if snapshot.stale:
        logger.warning(f"Showing stale standings from {snapshot.generated_at}")

    for entry in snapshot.entries:
        print(f"{entry.rank:>4}  {entry.display_name:<30} {entry.total_points:>6} pts  "
              f"{entry.record:>9}  lock {entry.lock_record:>7}  [{entry.settlement_status}]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pick scoring and leaderboard driver")
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    subparsers = parser.add_subparsers(dest='command', required=True)

    init_parser = subparsers.add_parser('init-db', help='Create tables')
    init_parser.set_defaults(func=cmd_init_db)

    contest_parser = subparsers.add_parser('resolve-contest', help='Resolve submissions for one contest')
    contest_parser.add_argument('contest_id', type=uuid.UUID)
    contest_parser.add_argument('--chunk-size', type=int, default=None)
    contest_parser.add_argument('--recompute-reason', type=str, default=None,
                                help='Replace the frozen outcome from current scores before resolving')
    contest_parser.set_defaults(func=cmd_resolve_contest)

    period_parser = subparsers.add_parser('resolve-period', help='Resolve every completed contest of a week')
    period_parser.add_argument('--season', type=int, required=True)
    period_parser.add_argument('--week', type=int, required=True)
    period_parser.add_argument('--chunk-size', type=int, default=None)
    period_parser.set_defaults(func=cmd_resolve_period)

    standings_parser = subparsers.add_parser('standings', help='Print ranked standings')
    standings_parser.add_argument('--scope', type=str, choices=SCOPES, default='season')
    standings_parser.add_argument('--season', type=int, required=True)
    standings_parser.add_argument('--week', type=int, default=None)
    standings_parser.add_argument('--settlement', type=str, nargs='*', default=None,
                                  help='Only include these settlement statuses (paid pending unpaid)')
    standings_parser.add_argument('--limit', type=int, default=None)
    standings_parser.set_defaults(func=cmd_standings)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    config = load_config(args.config)
    ctx = AppContext.build(config)

    logger.info(f"Running '{args.command}'")
    try:
        return args.func(ctx, args)
    except (ServiceException, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
