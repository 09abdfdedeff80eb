from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional


class FailureReason(str, Enum):
    NOT_OWNER = "not_owner"
    ASSIGNMENT_NOT_FOUND = "assignment_not_found"
    CONFIGURATION = "configuration"
    FILESYSTEM = "filesystem"
    STAGING = "staging"
    UNSUPPORTED_LANGUAGE = "unsupported_language"
    EXECUTION = "execution"
    TIMEOUT = "timeout"
    PARSE_FAILURE = "parse_failure"
    CANCELLED = "cancelled"
    PERSISTENCE = "persistence"
    INTERNAL = "internal"


@dataclass(frozen=True)
class AssignmentFixtures:
    assignment_id: int
    input_path: Path
    output_path: Path
    question_path: Path

    @classmethod
    def from_assignment(cls, assignment) -> "AssignmentFixtures":
        return cls(
            assignment_id=assignment.id,
            input_path=Path(assignment.input_path),
            output_path=Path(assignment.output_path),
            question_path=Path(assignment.question_path),
        )


@dataclass(frozen=True)
class SubmissionSource:
    submission_id: int
    source_path: Path

    @classmethod
    def from_submission(cls, submission) -> "SubmissionSource":
        return cls(submission_id=submission.id, source_path=Path(submission.source_path))

    @property
    def extension(self) -> str:
        return self.source_path.suffix.lstrip(".").lower()


@dataclass(frozen=True)
class WorkspaceHandle:
    submission_id: int
    path: Path


@dataclass(frozen=True)
class StagedLayout:
    """Files staged into a workspace, laid out as the entrypoint scripts expect."""

    root: Path
    input: Path
    output: Path
    question: Path
    source: Path
    entrypoint: Path
    version: int


@dataclass
class ProcessOutput:
    returncode: int
    stdout: str
    stderr: str
    duration_seconds: float
    output_truncated: bool = False


@dataclass
class RawOutput:
    exit_code: int
    stdout: str
    stderr: str
    execution_time_seconds: float

    @property
    def score_line(self) -> str:
        """Last line of stdout; the toolchain prints the score there."""
        lines = self.stdout.splitlines()
        return lines[-1] if lines else ""


@dataclass(frozen=True)
class GradeResult:
    score: Optional[int]
    failure: Optional[FailureReason] = None
    detail: Optional[str] = None

    @classmethod
    def scored(cls, score: int) -> "GradeResult":
        if score < 0:
            raise ValueError(f"negative_score: {score}")
        return cls(score=score)

    @classmethod
    def parse_failure(cls, detail: str) -> "GradeResult":
        return cls(score=0, failure=FailureReason.PARSE_FAILURE, detail=detail)

    @classmethod
    def failed(cls, reason: FailureReason, detail: str) -> "GradeResult":
        return cls(score=None, failure=reason, detail=detail)

    @property
    def succeeded(self) -> bool:
        return self.failure is None

    @property
    def is_parse_failure(self) -> bool:
        return self.failure == FailureReason.PARSE_FAILURE

    @property
    def is_cancelled(self) -> bool:
        return self.failure == FailureReason.CANCELLED


@dataclass
class SubmissionOutcome:
    submission_id: int
    result: GradeResult

    def to_dict(self) -> dict:
        return {
            "submission_id": self.submission_id,
            "score": self.result.score,
            "failure": self.result.failure.value if self.result.failure else None,
            "detail": self.result.detail,
        }


@dataclass
class GradingReport:
    assignment_id: int
    started_at: datetime
    finished_at: Optional[datetime] = None
    outcomes: List[SubmissionOutcome] = field(default_factory=list)

    def add(self, submission_id: int, result: GradeResult) -> None:
        self.outcomes.append(SubmissionOutcome(submission_id=submission_id, result=result))

    def outcome_for(self, submission_id: int) -> Optional[SubmissionOutcome]:
        for outcome in self.outcomes:
            if outcome.submission_id == submission_id:
                return outcome
        return None

    @property
    def graded(self) -> List[SubmissionOutcome]:
        return [o for o in self.outcomes if o.result.succeeded]

    @property
    def failed(self) -> List[SubmissionOutcome]:
        return [o for o in self.outcomes if not o.result.succeeded]

    def to_dict(self) -> dict:
        return {
            "assignment_id": self.assignment_id,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "total": len(self.outcomes),
            "graded": len(self.graded),
            "failed": len(self.failed),
            "outcomes": [o.to_dict() for o in sorted(self.outcomes, key=lambda o: o.submission_id)],
        }
