from pathlib import Path
from typing import List

from loguru import logger

from grading.toolchains import Toolchain


class SourceFileValidator:
    """Checks an uploaded source file before it is copied into a workspace."""

    DEFAULT_MAX_FILE_SIZE_MB: float = 1.0

    def __init__(self, max_file_size_mb: float = DEFAULT_MAX_FILE_SIZE_MB):
        self.max_file_size_mb = max_file_size_mb

    def validate(self, source_path: Path, toolchain: Toolchain) -> List[dict]:
        violations: List[dict] = []

        if source_path.is_symlink():
            violations.append({
                "type": "symlink",
                "file": str(source_path),
                "message": f"Source must not be a symlink: {source_path.name}",
            })
            return violations

        if not source_path.is_file():
            violations.append({
                "type": "missing_source",
                "file": str(source_path),
                "message": f"Source file not found: {source_path}",
            })
            return violations

        suffix = source_path.suffix.lstrip(".").lower()
        if suffix not in toolchain.extensions:
            violations.append({
                "type": "disallowed_extension",
                "file": str(source_path),
                "message": f"Disallowed source type: {source_path.suffix or source_path.name}",
            })

        size = source_path.stat().st_size
        if size == 0:
            violations.append({
                "type": "empty_source",
                "file": str(source_path),
                "message": "Source file is empty",
            })

        size_mb = size / (1024 * 1024)
        if size_mb > self.max_file_size_mb:
            violations.append({
                "type": "file_too_large",
                "file": str(source_path),
                "message": f"File size {size_mb:.2f}MB exceeds {self.max_file_size_mb}MB",
            })

        logger.debug(
            "source_validation_complete",
            file=str(source_path),
            size_bytes=size,
            violations_found=len(violations),
        )
        return violations
