"""Run the daily license expiry reminders once.

Schedule it with cron or any external scheduler:
    python scripts/run_expiry_reminders.py
"""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from license_notifier.interfaces.cli import main

if __name__ == "__main__":
    sys.exit(main())
