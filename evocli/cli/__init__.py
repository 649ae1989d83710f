"""
Command-line interface.

Typer app for one-shot commands, plus the interactive menu shell.
"""
