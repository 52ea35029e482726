#!/usr/bin/env python3
"""
worklog - Main Entry Point

Records work sessions and breaks from keyboard and mouse activity and lets
you review and correct them per day.
"""

import sys
from pathlib import Path

# Add the worklog package to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from worklog.cli import cli

if __name__ == '__main__':
    try:
        cli()
    except KeyboardInterrupt:
        print("\nProgram interrupted by user")
        sys.exit(0)
    except Exception as e:
        print(f"Unexpected error: {e}")
        sys.exit(1)
