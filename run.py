#!/usr/bin/env python
"""
Launcher script for Gift Tracker.

This script ensures the correct Python path is set before running the
birthday reminder command line, e.g.:

    python run.py send-reminders --dry-run
"""

import sys
from pathlib import Path

# Add the src/ directory to the Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from gift_tracker.main import main

if __name__ == "__main__":
    main()
