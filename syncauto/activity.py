"""Activity log entries and the sink they are written to."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Operation(str, Enum):
    """Operation tag carried by every log entry."""

    COPY = "COPY"
    COPY_WARNING = "COPY_WARNING"
    SYNC = "SYNC"
    SYNC_ERROR = "SYNC_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    ERROR = "ERROR"


LEVELS = {
    Operation.COPY: logging.INFO,
    Operation.SYNC: logging.INFO,
    Operation.COPY_WARNING: logging.WARNING,
    Operation.SYNC_ERROR: logging.ERROR,
    Operation.CONFIG_ERROR: logging.ERROR,
    Operation.ERROR: logging.ERROR,
}


def _now() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


@dataclass(frozen=True)
class LogEntry:
    """A single concluded operation."""

    folder_name: str
    operation: Operation
    message: str
    timestamp: str = field(default_factory=_now)

    def __str__(self) -> str:
        return (
            f"[{self.timestamp}] [{self.folder_name}] "
            f"[{self.operation.value}] {self.message}"
        )


class SyncLog:
    """
    Sink for activity entries, backed by a standard library logger.

    The sink is shared by every folder and destination task of a run;
    ``logging`` handlers serialize concurrent writes. Use it as a context
    manager so every pending entry is flushed once the run is over; the
    handlers themselves belong to whoever configured logging.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("syncauto.activity")

    def record(self, folder_name: str, operation: Operation, message: str) -> LogEntry:
        """Create an entry for a concluded operation and emit it."""
        entry = LogEntry(folder_name=folder_name, operation=operation, message=message)
        self.emit(entry)
        return entry

    def emit(self, entry: LogEntry) -> None:
        """Hand an entry to the underlying logger."""
        self.logger.log(LEVELS[entry.operation], str(entry))

    def close(self) -> None:
        """Flush every handler that receives this sink's entries."""
        logger = self.logger
        while logger:
            for handler in logger.handlers:
                handler.flush()
            if not logger.propagate:
                break
            logger = logger.parent

    def __enter__(self) -> "SyncLog":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
