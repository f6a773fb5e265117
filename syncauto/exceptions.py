"""Exception hierarchy for syncauto."""


class SyncAutoError(Exception):
    """Base class for all syncauto errors."""


class ResolutionError(SyncAutoError):
    """A configured path could not be resolved."""


class HomeDirectoryUnavailable(ResolutionError):
    """The path uses ``~/`` but the home directory cannot be determined."""


class ConfigEntryError(SyncAutoError):
    """A single destination entry is malformed."""


class MirrorWarning(SyncAutoError):
    """The optional mirror step failed; syncing continues without it."""


class CopyStepError(SyncAutoError):
    """A step of the local copy failed."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


class SourceNotFound(CopyStepError):
    """The copy source does not exist or cannot be inspected."""


class SourceOpenError(CopyStepError):
    """The copy source could not be opened or listed."""


class DestinationCreateError(CopyStepError):
    """A destination file or directory could not be created."""


class CopyIOError(CopyStepError):
    """Copying file contents failed part way."""


class DestinationSyncError(CopyStepError):
    """Flushing a written file to disk failed."""


class RemoteSyncError(SyncAutoError):
    """A remote sync invocation did not succeed."""


class ToolNotFound(RemoteSyncError):
    """The rclone executable could not be located."""


class RemoteSyncFailed(RemoteSyncError):
    """rclone ran but reported failure."""

    def __init__(self, message: str, returncode=None, output: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.output = output
