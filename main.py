"""Command-line Entry Point - Root Module.

Thin wrapper so the tracker can be started with `python main.py`.
It imports from the quake_tracker package.
"""

import sys

from quake_tracker.main import main

__all__ = [
    "main",
]

if __name__ == "__main__":
    sys.exit(main())
