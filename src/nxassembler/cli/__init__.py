"""
Command-line interface for nxdata-assembler.

Provides commands for assembling, validating, writing and checking
NXdata layouts.
"""

from .main import app, main

__all__ = ["main", "app"]
