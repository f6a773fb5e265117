"""Invocation of the external rclone executable."""

import logging
import os
import shutil
import subprocess
from typing import List, Optional

from .activity import Operation, SyncLog
from .exceptions import RemoteSyncFailed, ToolNotFound

FALLBACK_LOCATIONS = ["/usr/local/bin/rclone"]


class RcloneInvoker:
    """Runs ``rclone sync`` for one local path and one remote target."""

    def __init__(
        self,
        sync_log: SyncLog,
        executable: str = "rclone",
        timeout: Optional[float] = None,
        fallback_locations: Optional[List[str]] = None,
    ):
        self.sync_log = sync_log
        self.executable = executable
        self.timeout = timeout
        self.fallback_locations = (
            FALLBACK_LOCATIONS if fallback_locations is None else fallback_locations
        )
        self.logger = logging.getLogger(__name__)

    def locate(self) -> Optional[str]:
        """Return the path of the rclone executable, or None if missing."""
        found = shutil.which(self.executable)
        if found:
            return found

        for candidate in self.fallback_locations:
            if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
                return candidate
        return None

    def build_command(
        self, rclone: str, local_path: str, remote_type: str, remote_path: str
    ) -> List[str]:
        """Build the rclone command line for one destination."""
        return [rclone, "sync", local_path, f"{remote_type}:{remote_path}"]

    def sync(
        self, local_path: str, remote_type: str, remote_path: str, folder_name: str
    ) -> str:
        """
        Mirror ``local_path`` into ``remote_type:remote_path``.

        The call blocks until rclone exits. Failures are raised, never
        retried.

        Returns:
            Combined stdout/stderr of the rclone run

        Raises:
            ToolNotFound: rclone is not installed; nothing was executed
            RemoteSyncFailed: rclone could not be started, timed out or
                exited with a non-zero status
        """
        rclone = self.locate()
        if rclone is None:
            raise ToolNotFound(f"Error: {self.executable} not found in your PATH.")

        target = f"{remote_type}:{remote_path}"
        cmd = self.build_command(rclone, local_path, remote_type, remote_path)
        self.logger.debug(f"Running rclone command: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            output = e.output or ""
            if isinstance(output, bytes):
                output = output.decode(errors="replace")
            raise RemoteSyncFailed(
                f"Error syncing folder '{local_path}' to '{target}': "
                f"timed out after {self.timeout} seconds\nOutput: {output}",
                output=output,
            )
        except OSError as e:
            raise RemoteSyncFailed(
                f"Error syncing folder '{local_path}' to '{target}': {e}"
            )

        if result.returncode != 0:
            raise RemoteSyncFailed(
                f"Error syncing folder '{local_path}' to '{target}': "
                f"exit status {result.returncode}\nOutput: {result.stdout}",
                returncode=result.returncode,
                output=result.stdout,
            )

        self.sync_log.record(
            folder_name,
            Operation.SYNC,
            f"Folder '{local_path}' synced successfully to '{target}'",
        )
        return result.stdout
