#!/usr/bin/env python3
"""
Entry point for the repertoire trainer.

Usage:
    python run_trainer.py import repertoire.pgn
    python run_trainer.py drill <repertoire-id>

See python run_trainer.py --help for all options.
"""

import sys

from opening_drills.cli import main

if __name__ == "__main__":
    sys.exit(main())
