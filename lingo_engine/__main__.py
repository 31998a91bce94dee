"""
Entry point for running the package as a module.

Usage:
    python -m lingo_engine [command] [options]
"""

import sys
from lingo_engine.cli import main

if __name__ == "__main__":
    sys.exit(main())
