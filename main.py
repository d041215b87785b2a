#!/usr/bin/env python

"""
TimeLedger - Main Entry Point

Weekly time ledger: record manual entries, list a day and render the
weekly timesheet from the configured database.

Usage:
    python main.py report --date 2026-10-19
    python main.py add --task task-1 --hours 1 --minutes 30

Requirements:
    - Python 3.10+
    - See pyproject.toml for dependencies
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from timeledger.cli import main


if __name__ == "__main__":
    sys.exit(main())
