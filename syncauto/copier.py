"""Local tree mirroring used to stage content before a remote sync."""

import logging
import os
import shutil
import stat

from .activity import Operation, SyncLog
from .exceptions import (
    CopyIOError,
    DestinationCreateError,
    DestinationSyncError,
    SourceNotFound,
    SourceOpenError,
)


class CopyEngine:
    """
    Recursively copies a file or directory into a destination directory.

    Directory copies are depth-first and stop at the first failing entry:
    the remaining entries of that directory are not attempted and the error
    is raised to the caller. Files are always overwritten and fsync'ed
    before being reported as copied.
    """

    def __init__(self, sync_log: SyncLog):
        self.sync_log = sync_log
        self.logger = logging.getLogger(__name__)

    def copy(self, source_path: str, dest_directory: str, folder_name: str) -> int:
        """
        Mirror ``source_path`` into ``dest_directory``.

        Args:
            source_path: File or directory to copy
            dest_directory: Directory receiving the copy
            folder_name: Configured folder, used for log entries

        Returns:
            Number of files copied
        """
        try:
            info = os.stat(source_path)
        except OSError as e:
            raise SourceNotFound(f"Cannot access source '{source_path}': {e}", source_path)

        if stat.S_ISDIR(info.st_mode):
            return self._copy_directory(source_path, dest_directory, folder_name)

        dest_path = os.path.join(dest_directory, os.path.basename(source_path))
        self._copy_file(source_path, dest_path, folder_name)
        return 1

    def _copy_directory(self, source_dir: str, dest_dir: str, folder_name: str) -> int:
        try:
            os.makedirs(dest_dir, exist_ok=True)
        except OSError as e:
            raise DestinationCreateError(
                f"Error creating destination directory: {e}", dest_dir
            )

        try:
            with os.scandir(source_dir) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            raise SourceOpenError(f"Error listing source directory: {e}", source_dir)

        copied = 0
        for entry in entries:
            dest_entry = os.path.join(dest_dir, entry.name)
            if entry.is_dir():
                copied += self._copy_directory(entry.path, dest_entry, folder_name)
            else:
                self._copy_file(entry.path, dest_entry, folder_name)
                copied += 1
        return copied

    def _copy_file(self, source_path: str, dest_path: str, folder_name: str) -> None:
        try:
            src = open(source_path, "rb")
        except OSError as e:
            self.logger.debug(f"Error opening source file '{source_path}': {e}")
            raise SourceOpenError(f"Error opening source file: {e}", source_path)

        with src:
            try:
                dst = open(dest_path, "wb")
            except OSError as e:
                self.logger.debug(f"Error creating destination file '{dest_path}': {e}")
                raise DestinationCreateError(
                    f"Error creating destination file: {e}", dest_path
                )

            with dst:
                try:
                    shutil.copyfileobj(src, dst)
                except OSError as e:
                    raise CopyIOError(f"Error copying file contents: {e}", dest_path)

                try:
                    dst.flush()
                    os.fsync(dst.fileno())
                except OSError as e:
                    raise DestinationSyncError(
                        f"Error syncing destination file: {e}", dest_path
                    )

        self.sync_log.record(
            folder_name,
            Operation.COPY,
            f"File '{os.path.basename(source_path)}' copied successfully to '{dest_path}'",
        )
