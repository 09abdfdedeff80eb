import shutil
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from loguru import logger

from grading.errors import FilesystemError
from grading.models.results import WorkspaceHandle


class WorkspaceManager:
    PREFIX = "submission-"

    def __init__(self, workspace_root: Path):
        """
        Args:
            workspace_root: Directory under which one workspace per submission
                is created, as {workspace_root}/submission-{submission_id}/
        """
        self.workspace_root = Path(workspace_root)

    def path_for(self, submission_id: int) -> Path:
        return self.workspace_root / f"{self.PREFIX}{submission_id}"

    def acquire(self, submission_id: int) -> WorkspaceHandle:
        path = self.path_for(submission_id)
        try:
            self.workspace_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"workspace_root_unavailable: {self.workspace_root}: {e}") from e

        try:
            path.mkdir()
        except FileExistsError:
            raise FilesystemError(f"workspace_in_use: {path}") from None
        except OSError as e:
            raise FilesystemError(f"workspace_create_failed: {path}: {e}") from e

        logger.debug("workspace_acquired", submission_id=submission_id, path=str(path))
        return WorkspaceHandle(submission_id=submission_id, path=path)

    def release(self, handle: WorkspaceHandle) -> None:
        if not handle.path.exists():
            return
        try:
            shutil.rmtree(handle.path)
        except OSError as e:
            raise FilesystemError(f"workspace_delete_failed: {handle.path}: {e}") from e
        logger.debug("workspace_released", submission_id=handle.submission_id)

    @contextmanager
    def workspace(self, submission_id: int) -> Iterator[WorkspaceHandle]:
        handle = self.acquire(submission_id)
        try:
            yield handle
        finally:
            try:
                self.release(handle)
            except FilesystemError as e:
                logger.error("workspace_release_failed", submission_id=submission_id, error=str(e))

    def sweep_stale(self, max_age_seconds: float) -> int:
        """
        Remove workspaces left behind by a grading process that died.

        Only directories named like a workspace and older than max_age_seconds
        are touched, so workspaces of a run in progress survive. A leftover
        younger than max_age_seconds is kept, and acquire() refuses it with
        workspace_in_use, so retrying a crashed run fails those submissions
        until the leftover ages out. Keep max_age_seconds just above the run
        timeout plus container cleanup.
        """
        if not self.workspace_root.exists():
            return 0

        cutoff = time.time() - max_age_seconds
        removed = 0
        for path in self.workspace_root.glob(f"{self.PREFIX}*"):
            if not path.is_dir() or path.stat().st_mtime > cutoff:
                continue
            try:
                shutil.rmtree(path)
                removed += 1
            except OSError as e:
                logger.warning("stale_workspace_not_removed", path=str(path), error=str(e))

        if removed:
            logger.info("stale_workspaces_removed", count=removed, root=str(self.workspace_root))
        return removed
