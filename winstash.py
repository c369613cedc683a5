#!/usr/bin/env python3
"""Top-level wrapper script for winstash.

Allows running directly: python winstash.py [args]
"""

from winstash.cli import main

if __name__ == "__main__":
    main()
