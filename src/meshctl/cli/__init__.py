"""CLI package for meshctl.

This package provides the command-line interface, split into logical modules:
- app: Entry point, prerequisite checks and dispatch
- parser: Argument parsing for ``meshctl`` and the ``model`` subcommands
- model: list/view/search/import handlers
- output: Rich rendering, pagination and prompts
"""

from .app import main, run

__all__ = ["main", "run"]
