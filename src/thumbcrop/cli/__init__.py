"""CLI module for thumbcrop.

Provides the command-line interface for writing thumbnails, locating crop
windows, and batch processing directories of images.
"""

from __future__ import annotations

from thumbcrop.cli.main import OutputFormat, app

__all__ = ["OutputFormat", "app"]
