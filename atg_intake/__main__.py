"""
ATG Intake CLI entry point.

Usage:
    python -m atg_intake evaluate answers.json
"""

import sys
from .cli import main

if __name__ == "__main__":
    sys.exit(main())
