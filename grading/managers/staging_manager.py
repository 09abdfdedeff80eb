"""
Copies fixtures and the submitted source into a workspace.

Workspace layout (version 1), mounted as the container's working directory:

    input           assignment test input
    output          assignment expected output
    question        assignment question text
    main.<ext>      submitted source, extension lower-cased
    <entrypoint>    toolchain script (e.g. c-script.sh), executable

Entrypoint scripts rely on these names; bump WORKSPACE_LAYOUT_VERSION when
any of them changes.
"""
import shutil
from pathlib import Path
from typing import Optional

from loguru import logger

from grading.errors import StagingError
from grading.models.results import AssignmentFixtures, StagedLayout, SubmissionSource, WorkspaceHandle
from grading.security.file_validator import SourceFileValidator
from grading.toolchains import Toolchain

WORKSPACE_LAYOUT_VERSION = 1

INPUT_FILENAME = "input"
OUTPUT_FILENAME = "output"
QUESTION_FILENAME = "question"
SOURCE_STEM = "main"


class StagingManager:
    def __init__(self, scripts_dir: Path, validator: Optional[SourceFileValidator] = None):
        """
        Args:
            scripts_dir: Directory holding the toolchain entrypoint scripts
            validator: Source file checks; defaults to SourceFileValidator()
        """
        self.scripts_dir = Path(scripts_dir)
        self.validator = validator or SourceFileValidator()

    def stage(
        self,
        workspace: WorkspaceHandle,
        fixtures: AssignmentFixtures,
        source: SubmissionSource,
        toolchain: Toolchain,
    ) -> StagedLayout:
        violations = self.validator.validate(source.source_path, toolchain)
        if violations:
            raise StagingError(f"source_validation_failed: {violations[0]['message']}")

        root = workspace.path
        layout = StagedLayout(
            root=root,
            input=root / INPUT_FILENAME,
            output=root / OUTPUT_FILENAME,
            question=root / QUESTION_FILENAME,
            source=root / f"{SOURCE_STEM}.{source.extension}",
            entrypoint=root / toolchain.entrypoint,
            version=WORKSPACE_LAYOUT_VERSION,
        )

        self._copy(fixtures.input_path, layout.input)
        self._copy(fixtures.output_path, layout.output)
        self._copy(fixtures.question_path, layout.question)
        self._copy(source.source_path, layout.source)
        self._copy(self.scripts_dir / toolchain.entrypoint, layout.entrypoint)
        try:
            layout.entrypoint.chmod(0o755)
        except OSError as e:
            raise StagingError(f"entrypoint_chmod_failed: {layout.entrypoint.name}: {e}") from e

        logger.debug(
            "workspace_staged",
            submission_id=source.submission_id,
            assignment_id=fixtures.assignment_id,
            layout_version=WORKSPACE_LAYOUT_VERSION,
        )
        return layout

    @staticmethod
    def _copy(src: Path, dest: Path) -> None:
        if not src.is_file():
            raise StagingError(f"file_missing: {src}")
        try:
            shutil.copyfile(src, dest)
        except OSError as e:
            raise StagingError(f"copy_failed: {src.name}: {e}") from e
