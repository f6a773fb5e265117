"""Shared fixtures for syncauto tests."""

import os
import stat
import threading
from pathlib import Path

import pytest

from syncauto.activity import LogEntry, Operation, SyncLog


class RecordingLog(SyncLog):
    """SyncLog that keeps every entry in memory."""

    def __init__(self):
        super().__init__()
        self.entries: list[LogEntry] = []
        self._lock = threading.Lock()

    def emit(self, entry: LogEntry) -> None:
        with self._lock:
            self.entries.append(entry)

    def of(self, operation: Operation) -> list[LogEntry]:
        with self._lock:
            return [e for e in self.entries if e.operation == operation]


class FakeRclone:
    """Writes shell scripts that stand in for rclone and records their calls."""

    def __init__(self, root: Path):
        self.root = root
        self.calls = root / "calls.txt"

    def __call__(self, exit_code: int = 0, output: str = "ok", body: str = "") -> Path:
        script = self.root / "bin" / "rclone"
        script.parent.mkdir(exist_ok=True)
        script.write_text(
            "#!/bin/sh\n"
            f'echo "$@" >> "{self.calls}"\n'
            f"{body}\n"
            f'echo "{output}"\n'
            f'echo "{output} on stderr" >&2\n'
            f"exit {exit_code}\n"
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    def read_calls(self) -> list[str]:
        if not self.calls.exists():
            return []
        return [line for line in self.calls.read_text().splitlines() if line]


@pytest.fixture
def sync_log():
    return RecordingLog()


@pytest.fixture
def fake_rclone(tmp_path):
    """Factory for executable rclone stand-ins; needs a POSIX shell."""
    if os.name != "posix":
        pytest.skip("needs a POSIX shell")
    return FakeRclone(tmp_path)
