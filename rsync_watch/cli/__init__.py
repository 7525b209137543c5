"""Command-line interface for rsync-watch."""

from rsync_watch.cli.app import app

__all__ = ["app"]
