"""Main entry point for running funcstudy_pkg as a module.

This allows running funcstudy with:
    python -m funcstudy_pkg
    python -m funcstudy_pkg --health-check
    python -m funcstudy_pkg -e "x^2 - 4"
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
