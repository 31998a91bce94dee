"""
CLI entry point for the Lingo localization engine.

This module provides the command-line interface wrapper.
The main logic is in lingo_engine.app.main().
"""

from lingo_engine.app import main

__all__ = ["main"]

if __name__ == "__main__":
    import sys
    sys.exit(main())
