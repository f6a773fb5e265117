"""Tests for the rclone invoker."""

import subprocess

import pytest

from syncauto.activity import Operation
from syncauto.exceptions import RemoteSyncError, RemoteSyncFailed, ToolNotFound
from syncauto.rclone import RcloneInvoker


def test_build_command():
    invoker = RcloneInvoker(sync_log=None)
    assert invoker.build_command("/bin/rclone", "/data", "remoteA", "backup1") == [
        "/bin/rclone",
        "sync",
        "/data",
        "remoteA:backup1",
    ]


def test_missing_tool_never_executes(tmp_path, sync_log, monkeypatch):
    def fail_run(*args, **kwargs):
        raise AssertionError("subprocess.run must not be called")

    monkeypatch.setattr(subprocess, "run", fail_run)
    invoker = RcloneInvoker(
        sync_log, str(tmp_path / "no-such-rclone"), fallback_locations=[]
    )

    assert invoker.locate() is None
    with pytest.raises(ToolNotFound):
        invoker.sync(str(tmp_path), "remoteA", "backup1", "docs")
    assert sync_log.entries == []


def test_fallback_location_used(tmp_path, fake_rclone, sync_log):
    script = fake_rclone()
    invoker = RcloneInvoker(
        sync_log, "definitely-not-on-path-rclone", fallback_locations=[str(script)]
    )
    assert invoker.locate() == str(script)


def test_successful_sync_logs_sync_entry(tmp_path, fake_rclone, sync_log):
    script = fake_rclone(exit_code=0, output="transferred")
    invoker = RcloneInvoker(sync_log, str(script))

    output = invoker.sync("/data/docs", "remoteA", "backup1", "docs")

    assert "transferred" in output
    assert "transferred on stderr" in output
    assert fake_rclone.read_calls() == ["sync /data/docs remoteA:backup1"]
    [entry] = sync_log.entries
    assert entry.operation == Operation.SYNC
    assert entry.folder_name == "docs"
    assert "/data/docs" in entry.message
    assert "remoteA:backup1" in entry.message


def test_nonzero_exit_raises_with_output(tmp_path, fake_rclone, sync_log):
    script = fake_rclone(exit_code=3, output="directory not found")
    invoker = RcloneInvoker(sync_log, str(script))

    with pytest.raises(RemoteSyncFailed) as excinfo:
        invoker.sync("/data/docs", "remoteA", "backup1", "docs")

    assert excinfo.value.returncode == 3
    assert "directory not found" in excinfo.value.output
    assert "directory not found on stderr" in str(excinfo.value)
    assert len(fake_rclone.read_calls()) == 1
    assert sync_log.entries == []


def test_timeout_is_reported_as_failure(fake_rclone, sync_log):
    script = fake_rclone(body="exec sleep 5")
    invoker = RcloneInvoker(sync_log, str(script), timeout=0.2)

    with pytest.raises(RemoteSyncFailed, match="timed out"):
        invoker.sync("/data", "remoteA", "backup1", "docs")


def test_exec_failure_is_reported(tmp_path, sync_log, monkeypatch):
    def broken_run(*args, **kwargs):
        raise PermissionError("permission denied")

    monkeypatch.setattr(subprocess, "run", broken_run)
    monkeypatch.setattr(RcloneInvoker, "locate", lambda self: "/usr/bin/rclone")
    invoker = RcloneInvoker(sync_log)

    with pytest.raises(RemoteSyncError, match="permission denied"):
        invoker.sync("/data", "remoteA", "backup1", "docs")
