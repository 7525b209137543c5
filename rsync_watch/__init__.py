"""rsync-watch - keep local directories synchronized into remote containers.

Each configured service is mirrored with rsync over ssh, kept up to date
with fswatch, and restarted whenever its rsync server becomes unreachable.
"""

from rsync_watch.version import __version__

__all__ = ["__version__"]
