#!/usr/bin/env python3

"""
Command-line interface for dirlock
"""

import sys

from dirlock.cli import main

if __name__ == '__main__':
    sys.exit(main())
