"""Allow running as ``python -m rsync_watch``."""

from rsync_watch.cli.app import app

if __name__ == "__main__":
    app()
