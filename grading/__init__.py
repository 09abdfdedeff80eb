from grading.managers import (
    DockerManager,
    GradingManager,
    ProcessRunner,
    ScoringManager,
    StagingManager,
    WorkspaceManager,
)

from grading.models.database import (
    Assignment,
    Subject,
    Submission,
)

from grading.models.results import (
    FailureReason,
    GradeResult,
    GradingReport,
    RawOutput,
)

from grading.toolchains import SourceLanguage, Toolchain

__all__ = [
    # Models
    "Assignment",
    "Subject",
    "Submission",
    # Results
    "FailureReason",
    "GradeResult",
    "GradingReport",
    "RawOutput",
    # Toolchains
    "SourceLanguage",
    "Toolchain",
    # Managers
    "DockerManager",
    "GradingManager",
    "ProcessRunner",
    "ScoringManager",
    "StagingManager",
    "WorkspaceManager",
]
