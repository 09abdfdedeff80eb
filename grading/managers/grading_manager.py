"""
Grades every submission of an assignment.

Each submission runs through its own pipeline on a bounded thread pool:

    resolve language -> acquire workspace -> stage -> run container
    -> interpret output -> release workspace

A failure at any step is recorded against that submission only. Results are
written back on the calling thread as they complete, so the persistence
session is never shared between threads. Only the ownership check, a missing
assignment and configuration errors abort the whole call.
"""
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Optional

from loguru import logger

from grading.errors import ConfigurationError, GradingError, NotOwnerError, PersistenceError
from grading.managers.docker_manager import DockerManager
from grading.managers.scoring_manager import ScoringManager
from grading.managers.staging_manager import StagingManager
from grading.managers.workspace_manager import WorkspaceManager
from grading.models.results import (
    AssignmentFixtures,
    FailureReason,
    GradeResult,
    GradingReport,
    SubmissionSource,
)
from grading.toolchains import resolve_language, validate_toolchains


class GradingManager:
    def __init__(
        self,
        repository,
        authorizer,
        workspace_manager: WorkspaceManager,
        staging_manager: StagingManager,
        docker_manager: DockerManager,
        scoring_manager: Optional[ScoringManager] = None,
        max_workers: int = 1,
    ):
        """
        Args:
            repository: Provides find_assignment, find_submissions_for_assignment
                and save_submission
            authorizer: Provides is_owner(teacher_email, assignment_id)
            workspace_manager: Owns the per-submission directories
            staging_manager: Lays out fixtures and source in a workspace
            docker_manager: Runs the toolchain container
            scoring_manager: Reads the score from container output
            max_workers: Submissions graded concurrently (1 = sequential)
        """
        if max_workers < 1:
            raise ConfigurationError(f"invalid_max_workers: {max_workers}")
        validate_toolchains(docker_manager.toolchains)

        self.repository = repository
        self.authorizer = authorizer
        self.workspace_manager = workspace_manager
        self.staging_manager = staging_manager
        self.docker_manager = docker_manager
        self.scoring_manager = scoring_manager or ScoringManager()
        self.max_workers = max_workers

    def grade_assignment(
        self,
        assignment_id: int,
        teacher_email: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> GradingReport:
        if not self.authorizer.is_owner(teacher_email, assignment_id):
            logger.warning("grading_not_owner", assignment_id=assignment_id, teacher=teacher_email)
            raise NotOwnerError(f"not_owner: assignment {assignment_id}")

        assignment = self.repository.find_assignment(assignment_id)
        submissions = self.repository.find_submissions_for_assignment(assignment_id)
        fixtures = AssignmentFixtures.from_assignment(assignment)
        submissions_by_id = {submission.id: submission for submission in submissions}

        if cancel_event is None:
            cancel_event = threading.Event()

        report = GradingReport(assignment_id=assignment_id, started_at=datetime.now(timezone.utc))
        logger.info(
            "grading_started",
            assignment_id=assignment_id,
            submissions=len(submissions),
            workers=self.max_workers,
        )

        pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="grading")
        try:
            futures = {
                pool.submit(
                    self._grade_submission,
                    fixtures,
                    SubmissionSource.from_submission(submission),
                    cancel_event,
                ): submission.id
                for submission in submissions
            }
            for future in as_completed(futures):
                submission = submissions_by_id[futures[future]]
                result = self._write_back(submission, future.result())
                report.add(submission.id, result)
        except KeyboardInterrupt:
            logger.warning("grading_interrupted", assignment_id=assignment_id)
            cancel_event.set()
            pool.shutdown(wait=True, cancel_futures=True)
            raise
        finally:
            pool.shutdown(wait=True)

        report.finished_at = datetime.now(timezone.utc)
        logger.info(
            "grading_completed",
            assignment_id=assignment_id,
            total=len(report.outcomes),
            graded=len(report.graded),
            failed=len(report.failed),
        )
        return report

    def _grade_submission(
        self,
        fixtures: AssignmentFixtures,
        source: SubmissionSource,
        cancel_event: threading.Event,
    ) -> GradeResult:
        if cancel_event.is_set():
            return GradeResult.failed(FailureReason.CANCELLED, "grading_cancelled")

        try:
            language = resolve_language(source.source_path, self.docker_manager.toolchains)
            toolchain = self.docker_manager.toolchain_for(language)

            with self.workspace_manager.workspace(source.submission_id) as workspace:
                self.staging_manager.stage(workspace, fixtures, source, toolchain)
                raw = self.docker_manager.execute(
                    workspace,
                    language,
                    extension_hint=source.extension,
                    cancel_event=cancel_event,
                )
                result = self.scoring_manager.interpret(raw)
        except GradingError as e:
            logger.warning(
                "submission_grading_failed",
                submission_id=source.submission_id,
                reason=e.reason.value,
                error=str(e),
            )
            return GradeResult.failed(e.reason, str(e))
        except Exception as e:
            logger.exception("submission_grading_error", submission_id=source.submission_id)
            return GradeResult.failed(FailureReason.INTERNAL, f"internal_error: {e}")

        logger.info(
            "submission_graded",
            submission_id=source.submission_id,
            score=result.score,
            parse_failure=result.is_parse_failure,
        )
        return result

    def _write_back(self, submission, result: GradeResult) -> GradeResult:
        # Cancelled submissions were never graded; leave them untouched
        if result.is_cancelled:
            return result

        submission.graded_at = datetime.now(timezone.utc)
        if result.succeeded:
            submission.score = result.score
            submission.status = "graded"
            submission.failure_reason = None
            submission.failure_detail = None
        else:
            if result.is_parse_failure:
                submission.score = 0
            submission.status = "failed"
            submission.failure_reason = result.failure.value
            submission.failure_detail = result.detail

        try:
            self.repository.save_submission(submission)
        except PersistenceError as e:
            logger.error("submission_write_back_failed", submission_id=submission.id, error=str(e))
            return GradeResult.failed(e.reason, str(e))
        return result
