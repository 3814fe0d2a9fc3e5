"""
PhotoShare CLI - Command line tools for running the gateway.
"""

from __future__ import annotations

from .main import app, main

__all__ = ["main", "app"]
