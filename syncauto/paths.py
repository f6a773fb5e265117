"""Home directory expansion for configured paths."""

from pathlib import Path

from .exceptions import HomeDirectoryUnavailable

HOME_PREFIX = "~/"


def expand_home(path: str) -> str:
    """
    Expand a leading ``~/`` into the current user's home directory.

    Args:
        path: Path as written in the configuration

    Returns:
        The path with the home directory substituted, or ``path`` unchanged
        when it does not start with ``~/``
    """
    if not path.startswith(HOME_PREFIX):
        return path

    try:
        home = str(Path.home())
    except (RuntimeError, KeyError) as e:
        raise HomeDirectoryUnavailable(f"Cannot determine home directory: {e}")

    if not home or home == "~":
        raise HomeDirectoryUnavailable("Cannot determine home directory")

    return home + path[1:]
