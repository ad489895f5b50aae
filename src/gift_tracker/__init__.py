"""Gift Tracker - birthday reminders and gift idea tracking."""

__version__ = "0.1.0"
