from grading.models.database import (
    Assignment,
    Base,
    Subject,
    Submission,
)
from grading.models.results import (
    AssignmentFixtures,
    FailureReason,
    GradeResult,
    GradingReport,
    ProcessOutput,
    RawOutput,
    StagedLayout,
    SubmissionOutcome,
    SubmissionSource,
    WorkspaceHandle,
)

__all__ = [
    "Assignment",
    "AssignmentFixtures",
    "Base",
    "FailureReason",
    "GradeResult",
    "GradingReport",
    "ProcessOutput",
    "RawOutput",
    "StagedLayout",
    "Subject",
    "Submission",
    "SubmissionOutcome",
    "SubmissionSource",
    "WorkspaceHandle",
]
