"""
Allow running the package as a module.

This module enables running the package with:
    python -m go_copystd

It simply delegates to the main() function from go_copystd.py.
"""

import sys

from .go_copystd import main

if __name__ == "__main__":
    sys.exit(main())
