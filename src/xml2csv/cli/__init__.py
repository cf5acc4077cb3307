"""Command-line interface module for xml2csv.

This module provides the ``xml2csv`` command with convert, columns and tree
subcommands.
"""

from .main import main

__all__ = ["main"]
