#!/usr/bin/env python3
"""
EVO CLI entry point.

Same application as the installed `evocli` command.

Usage:
    python cli.py --help
    python cli.py                      # Interactive menu
    python cli.py instance list
    python cli.py --token ID:SECRET user info
"""

from evocli.cli.main import app

if __name__ == "__main__":
    app()
