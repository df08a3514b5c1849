#!/usr/bin/env python3
"""
Locate installations of a CLI tool (default: claude).

Usage:
    locate.py                 # Print the selected binary path
    locate.py list            # Every installation, best first
    locate.py shells          # Detected shell environments
    locate.py --help          # All commands
"""

import os
import sys

# Add current directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from cli_locator.cli import main


if __name__ == "__main__":
    sys.exit(main())
