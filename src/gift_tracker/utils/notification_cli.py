"""
Birthday Reminder CLI Utility

Command-line interface for the scheduler-facing parts of Gift Tracker.
Point a cron job or systemd timer at `send-reminders` once a day.

Usage Examples:
    # Send today's reminders
    gift-tracker send-reminders

    # See what would be sent on a given day without sending
    gift-tracker send-reminders --date 2024-03-01 --dry-run

    # Print the result as JSON for the scheduler's logs
    gift-tracker send-reminders --json

    # List a user's upcoming birthdays
    gift-tracker upcoming ann@example.com --days 30

    # Create the database tables
    gift-tracker init-db
"""

import argparse
import json
import logging
import os
import sys
from datetime import date

from gift_tracker.services.database import initialize_app_database
from gift_tracker.services.exceptions import StoreUnavailable
from gift_tracker.utils.datetime_utils import format_date

logger = logging.getLogger(__name__)

COMMANDS = ("send-reminders", "upcoming", "init-db")


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging from --verbose or GIFT_TRACKER_LOG_LEVEL."""
    if verbose:
        level = logging.DEBUG
    else:
        level_name = os.environ.get("GIFT_TRACKER_LOG_LEVEL", "INFO").upper()
        level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def _parse_run_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD")


def send_reminders(run_date=None, dry_run: bool = False, as_json: bool = False) -> int:
    """Run the reminder dispatcher once."""
    from gift_tracker.services.notification_service import dispatch_birthday_notifications

    try:
        result = dispatch_birthday_notifications(today=run_date, dry_run=dry_run)
    except StoreUnavailable as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if as_json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(result.get_summary())
    return 0


def list_upcoming(user: str, days=None, run_date=None) -> int:
    """Print a user's upcoming birthdays."""
    from gift_tracker.services import profile_service, recipient_service

    if user.isdigit():
        profile = profile_service.get_profile(int(user))
    else:
        profile = profile_service.get_profile_by_email(user)
    if profile is None:
        print(f"ERROR: No profile found for '{user}'", file=sys.stderr)
        return 1

    entries = recipient_service.get_upcoming_birthdays(profile.id, window_days=days, today=run_date)
    if not entries:
        print("No upcoming birthdays.")
        return 0

    for entry in entries:
        when = "Today!" if entry.days_until == 0 else f"in {entry.days_until} days"
        print(
            f"{format_date(entry.next_birthday)}  {entry.recipient.name:<30} "
            f"turns {entry.turning_age:<3} {when}"
        )
    return 0


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="gift-tracker",
        description="Birthday reminders for Gift Tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Send today's reminders (run once a day):
    gift-tracker send-reminders

  Preview a given day's reminders:
    gift-tracker send-reminders --date 2024-03-01 --dry-run

  List upcoming birthdays for a user:
    gift-tracker upcoming ann@example.com --days 30
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    send_parser = subparsers.add_parser("send-reminders", help="Send due birthday reminders")
    send_parser.add_argument(
        "--date",
        dest="run_date",
        type=_parse_run_date,
        help="Run as if today were this date (YYYY-MM-DD)",
    )
    send_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be sent without sending or recording",
    )
    send_parser.add_argument("--json", dest="as_json", action="store_true", help="Print JSON")

    upcoming_parser = subparsers.add_parser("upcoming", help="List a user's upcoming birthdays")
    upcoming_parser.add_argument("user", help="Profile email or ID")
    upcoming_parser.add_argument("--days", type=int, help="Lookahead window in days")
    upcoming_parser.add_argument(
        "--date",
        dest="run_date",
        type=_parse_run_date,
        help="Reference date (YYYY-MM-DD)",
    )

    subparsers.add_parser("init-db", help="Create database tables")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    configure_logging(args.verbose)

    try:
        initialize_app_database()
    except Exception as e:
        logger.exception("Database initialization failed")
        print(f"ERROR: Database unavailable: {e}", file=sys.stderr)
        return 1

    if args.command == "send-reminders":
        return send_reminders(args.run_date, dry_run=args.dry_run, as_json=args.as_json)
    elif args.command == "upcoming":
        if args.days is not None and args.days < 0:
            print("ERROR: --days must be zero or greater", file=sys.stderr)
            return 1
        return list_upcoming(args.user, days=args.days, run_date=args.run_date)
    elif args.command == "init-db":
        print("Database ready.")
        return 0
    else:
        print(f"Unknown command: {args.command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
