"""
User interface modules.

This package contains user interface components:
- Command-line interface (CLI)
"""

from .cli import CLIHandler, main

__all__ = [
    'CLIHandler',
    'main',
]
