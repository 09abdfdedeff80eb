import os
import time

import pytest

from grading.errors import FilesystemError
from grading.managers import workspace_manager as wm
from grading.managers.workspace_manager import WorkspaceManager


def test_path_is_keyed_by_submission_id(tmp_path):
    manager = WorkspaceManager(tmp_path)

    assert manager.path_for(7) == tmp_path / "submission-7"
    assert manager.path_for(7) == WorkspaceManager(tmp_path).path_for(7)
    paths = {manager.path_for(i) for i in range(100)}
    assert len(paths) == 100


def test_acquire_and_release(tmp_path):
    manager = WorkspaceManager(tmp_path / "nested" / "root")

    handle = manager.acquire(3)
    assert handle.path.is_dir()
    assert handle.submission_id == 3
    (handle.path / "sub").mkdir()
    (handle.path / "sub" / "file").write_text("x")

    manager.release(handle)
    assert not handle.path.exists()
    # second release is a no-op
    manager.release(handle)


def test_acquire_twice_collides(tmp_path):
    manager = WorkspaceManager(tmp_path)
    manager.acquire(1)

    with pytest.raises(FilesystemError):
        manager.acquire(1)


def test_acquire_unwritable_root(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    manager = WorkspaceManager(blocker)

    with pytest.raises(FilesystemError):
        manager.acquire(1)


def test_workspace_context_releases_on_error(tmp_path):
    manager = WorkspaceManager(tmp_path)

    with pytest.raises(RuntimeError):
        with manager.workspace(5) as handle:
            assert handle.path.exists()
            raise RuntimeError("boom")

    assert not manager.path_for(5).exists()


def test_workspace_context_swallows_release_failure(tmp_path, monkeypatch):
    manager = WorkspaceManager(tmp_path)

    def fail_rmtree(path):
        raise OSError("device busy")

    monkeypatch.setattr(wm.shutil, "rmtree", fail_rmtree)

    with manager.workspace(6) as handle:
        pass

    assert handle.path.exists()


def test_sweep_stale_only_removes_old_workspaces(tmp_path):
    manager = WorkspaceManager(tmp_path)
    old = manager.acquire(1)
    fresh = manager.acquire(2)
    unrelated = tmp_path / "keep-me"
    unrelated.mkdir()
    an_hour_ago = time.time() - 3600
    os.utime(old.path, (an_hour_ago, an_hour_ago))
    os.utime(unrelated, (an_hour_ago, an_hour_ago))

    assert manager.sweep_stale(max_age_seconds=600) == 1
    assert not old.path.exists()
    assert fresh.path.exists()
    assert unrelated.exists()


def test_sweep_missing_root(tmp_path):
    assert WorkspaceManager(tmp_path / "absent").sweep_stale(0) == 0


def test_leftover_from_crashed_run_blocks_until_swept(tmp_path):
    manager = WorkspaceManager(tmp_path)
    leftover = manager.acquire(4)
    ten_minutes_ago = time.time() - 601
    os.utime(leftover.path, (ten_minutes_ago, ten_minutes_ago))

    with pytest.raises(FilesystemError, match="workspace_in_use"):
        manager.acquire(4)

    assert manager.sweep_stale(max_age_seconds=600) == 1
    assert manager.acquire(4).path.is_dir()


def test_default_sweep_age_outlasts_a_running_container():
    from config import Settings

    settings = Settings()
    cleanup_seconds = 30

    assert settings.workspace_stale_after_seconds > settings.grading_run_timeout_seconds + cleanup_seconds
    assert settings.workspace_stale_after_seconds <= 900
