"""
syncauto: Mirror named local folders to rclone remotes.

This package provides a one-shot synchronization pass that optionally stages
content into each configured folder and then runs ``rclone sync`` against
every destination of that folder concurrently.
"""

__version__ = "0.1.0"
