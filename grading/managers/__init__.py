from grading.managers.docker_manager import DockerManager
from grading.managers.grading_manager import GradingManager
from grading.managers.process_runner import ProcessRunner
from grading.managers.scoring_manager import ScoringManager
from grading.managers.staging_manager import StagingManager
from grading.managers.workspace_manager import WorkspaceManager

__all__ = [
    "DockerManager",
    "GradingManager",
    "ProcessRunner",
    "ScoringManager",
    "StagingManager",
    "WorkspaceManager",
]
