#!/usr/bin/env python3
"""Context Engineering Agent CLI entrypoint.

Usage:
    python main.py                      # interactive mode
    python main.py "Find the config loader and explain it"
    python main.py --thread <id> "What did we discuss?"
"""

import sys

from contextAgent.cli import main

if __name__ == "__main__":
    sys.exit(main())
