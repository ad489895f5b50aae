"""
Main entry point for Gift Tracker.

The web UI talks to the record services directly; this entry point is
what a scheduler invokes to run the daily birthday reminder pass.
"""

import sys

from gift_tracker.utils.config import get_config
from gift_tracker.utils.notification_cli import COMMANDS
from gift_tracker.utils.notification_cli import main as cli_main


def main(argv=None):
    """
    Application entry point.

    Defaults to `send-reminders` when no command is given, so a bare
    `gift-tracker` (or `gift-tracker -v`) in a crontab does the daily run.
    """
    if argv is None:
        argv = sys.argv[1:]
    if not any(arg in COMMANDS for arg in argv):
        argv = [*argv, "send-reminders"]

    config = get_config()
    print(f"Starting Gift Tracker v{config.app_version} ({config.environment})", file=sys.stderr)

    sys.exit(cli_main(argv))


if __name__ == "__main__":
    main()
