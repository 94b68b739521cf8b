"""
CLI entry point for the controller bootstrap.

Usage::

    python -m controller_init.cli myapp.controllers --format json

Exit Codes
----------
- 0: All controllers initialized
- 1: Startup failed
- 2: Configuration error
"""

from __future__ import annotations

import sys

from . import main

if __name__ == "__main__":
    sys.exit(main())
