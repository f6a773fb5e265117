"""Core synchronization management: per-folder processing and the bounded run."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Mapping, Optional

from .activity import Operation, SyncLog
from .config import AppConfig, FolderSpec
from .copier import CopyEngine
from .exceptions import (
    ConfigEntryError,
    CopyStepError,
    MirrorWarning,
    RemoteSyncError,
    ResolutionError,
)
from .paths import expand_home
from .rclone import RcloneInvoker

DEFAULT_MAX_CONCURRENT_FOLDERS = 5


@dataclass(frozen=True)
class Destination:
    """A parsed ``remoteType:remotePath`` target."""

    remote_type: str
    remote_path: str

    def __str__(self) -> str:
        return f"{self.remote_type}:{self.remote_path}"


def parse_destination(raw: str) -> Destination:
    """
    Split a destination string into remote type and remote path.

    Exactly one ``:`` separating two non-empty parts is accepted.
    """
    parts = raw.split(":")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ConfigEntryError(f"Invalid destination format in config: {raw}")
    return Destination(remote_type=parts[0], remote_path=parts[1])


class FolderProcessor:
    """Handles the mirror step and the destination fan-out for one folder."""

    def __init__(
        self,
        sync_log: SyncLog,
        copier: CopyEngine,
        invoker: RcloneInvoker,
        max_concurrent_destinations: Optional[int] = None,
    ):
        self.sync_log = sync_log
        self.copier = copier
        self.invoker = invoker
        self.max_concurrent_destinations = max_concurrent_destinations
        self.logger = logging.getLogger(__name__)

    def process(self, folder_name: str, spec: FolderSpec) -> None:
        """
        Process one folder; outcomes are reported through the sync log.

        Returns once every destination sync for the folder has concluded.
        """
        try:
            source = expand_home(spec.source)
        except ResolutionError as e:
            self.sync_log.record(
                folder_name,
                Operation.ERROR,
                f"Error processing folder: error expanding '{spec.source}': {e}",
            )
            return

        if spec.mirror_source:
            try:
                self.mirror(folder_name, spec.mirror_source, source)
            except MirrorWarning as e:
                self.sync_log.record(folder_name, Operation.COPY_WARNING, str(e))

        destinations = []
        for raw in spec.destinations:
            try:
                destinations.append(parse_destination(raw))
            except ConfigEntryError as e:
                self.sync_log.record(folder_name, Operation.CONFIG_ERROR, str(e))

        if not destinations:
            self.logger.debug(f"No valid destinations for folder '{folder_name}'")
            return

        workers = len(destinations)
        if self.max_concurrent_destinations:
            workers = min(workers, self.max_concurrent_destinations)

        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix=f"sync-{folder_name}"
        ) as executor:
            futures = {
                executor.submit(self.sync_destination, folder_name, source, dest): dest
                for dest in destinations
            }
            for future in as_completed(futures):
                dest = futures[future]
                try:
                    future.result()
                except Exception as e:
                    self.logger.debug("Unexpected sync failure", exc_info=True)
                    self.sync_log.record(
                        folder_name,
                        Operation.SYNC_ERROR,
                        f"Error syncing folder '{source}' to '{dest}': {e}",
                    )

    def mirror(self, folder_name: str, mirror_source: str, source: str) -> int:
        """
        Copy ``mirror_source`` into the folder's source tree.

        Raises:
            MirrorWarning: the mirror source could not be resolved or copied
        """
        try:
            copy_from = expand_home(mirror_source)
            return self.copier.copy(copy_from, source, folder_name)
        except (ResolutionError, CopyStepError) as e:
            raise MirrorWarning(
                f"Warning copying item: '{e}', maybe the original source path "
                f"is empty: '{mirror_source}'"
            )

    def sync_destination(self, folder_name: str, source: str, dest: Destination) -> bool:
        """Run one destination sync, reporting failure as SYNC_ERROR."""
        try:
            self.invoker.sync(source, dest.remote_type, dest.remote_path, folder_name)
            return True
        except RemoteSyncError as e:
            self.sync_log.record(folder_name, Operation.SYNC_ERROR, str(e))
            return False


class SyncOrchestrator:
    """Runs every configured folder once under a shared concurrency cap."""

    def __init__(
        self,
        processor: FolderProcessor,
        max_concurrent_folders: int = DEFAULT_MAX_CONCURRENT_FOLDERS,
    ):
        if max_concurrent_folders < 1:
            raise ValueError("max_concurrent_folders must be at least 1")
        self.processor = processor
        self.max_concurrent_folders = max_concurrent_folders
        self.sync_log = processor.sync_log
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: AppConfig, sync_log: SyncLog) -> "SyncOrchestrator":
        """Wire the copy engine, invoker and folder processor from config."""
        processor = FolderProcessor(
            sync_log,
            CopyEngine(sync_log),
            RcloneInvoker(sync_log, config.rclone_path, timeout=config.sync_timeout),
            max_concurrent_destinations=config.max_concurrent_destinations,
        )
        return cls(processor, config.max_concurrent_folders)

    def run(self, folders: Mapping[str, FolderSpec]) -> None:
        """Process every folder and wait for all of them to finish."""
        if not folders:
            self.logger.info("No folders configured")
            return

        self.logger.info(
            f"Starting sync of {len(folders)} folders "
            f"({self.max_concurrent_folders} at a time)"
        )

        tokens = threading.BoundedSemaphore(self.max_concurrent_folders)
        with ThreadPoolExecutor(
            max_workers=min(len(folders), self.max_concurrent_folders),
            thread_name_prefix="folder",
        ) as executor:
            futures = [
                executor.submit(self._run_folder, tokens, name, spec)
                for name, spec in folders.items()
            ]
            for future in as_completed(futures):
                future.result()

        self.logger.info("All folders processed")

    def _run_folder(
        self, tokens: threading.BoundedSemaphore, folder_name: str, spec: FolderSpec
    ) -> None:
        with tokens:
            try:
                self.processor.process(folder_name, spec)
            except Exception as e:
                self.logger.debug("Unexpected folder failure", exc_info=True)
                self.sync_log.record(
                    folder_name, Operation.ERROR, f"Error processing folder: {e}"
                )
