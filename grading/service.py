import threading
from pathlib import Path
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from config import Settings, config
from grading.managers.docker_manager import DockerManager
from grading.managers.grading_manager import GradingManager
from grading.managers.process_runner import ProcessRunner
from grading.managers.scoring_manager import ScoringManager
from grading.managers.staging_manager import StagingManager
from grading.managers.workspace_manager import WorkspaceManager
from grading.repositories.assignment_repository import AssignmentRepository
from grading.security.file_validator import SourceFileValidator
from grading.security.ownership import SubjectOwnershipPolicy
from grading.toolchains import build_toolchains


def build_grading_manager(
    session: Session,
    settings: Settings = config,
    runner: Optional[ProcessRunner] = None,
) -> GradingManager:
    toolchains = build_toolchains(settings.toolchain_images)
    return GradingManager(
        repository=AssignmentRepository(session),
        authorizer=SubjectOwnershipPolicy(session),
        workspace_manager=WorkspaceManager(Path(settings.workspace_root)),
        staging_manager=StagingManager(
            scripts_dir=Path(settings.toolchain_scripts_path),
            validator=SourceFileValidator(max_file_size_mb=settings.submission_max_size_mb),
        ),
        docker_manager=DockerManager(
            toolchains=toolchains,
            runner=runner or ProcessRunner(max_output_bytes=settings.process_output_limit_bytes),
            docker_binary=settings.docker_binary,
            mount_path=settings.container_mount_path,
            run_timeout_seconds=settings.grading_run_timeout_seconds,
        ),
        scoring_manager=ScoringManager(),
        max_workers=settings.grading_max_workers,
    )


def grade_assignment(
    assignment_id: int,
    teacher_email: str,
    cancel_event: Optional[threading.Event] = None,
    settings: Settings = config,
    session_factory=None,
    runner: Optional[ProcessRunner] = None,
) -> dict:
    """
    Grade every submission of an assignment in its own database session.

    Args:
        session_factory: Callable returning a Session; defaults to the
            configured database
        runner: Process runner handed to the docker manager

    Returns:
        The grading report as a dict
    """
    from grading.db import grading_session

    with grading_session(session_factory) as session:
        manager = build_grading_manager(session, settings, runner=runner)
        swept = manager.workspace_manager.sweep_stale(settings.workspace_stale_after_seconds)
        if swept:
            logger.info("stale_workspaces_swept", count=swept)
        report = manager.grade_assignment(assignment_id, teacher_email, cancel_event=cancel_event)
        return report.to_dict()
