"""Command-line interface for streamchat."""

from .app import app, main

__all__ = ["app", "main"]
