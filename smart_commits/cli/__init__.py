"""Command Line Interface Package"""

from smart_commits.cli.main import main

__all__ = ["main"]
