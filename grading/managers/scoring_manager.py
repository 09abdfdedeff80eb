"""
Turns captured container output into a grade.

The toolchain prints the score as the last line of stdout. Output that does
not end in a non-negative integer is graded 0 and flagged as a parse failure,
so it stays distinguishable from a legitimate score of 0.
"""
import re

from loguru import logger

from grading.models.results import GradeResult, RawOutput

SCORE_PATTERN = re.compile(r"[0-9]+")


class ScoringManager:
    def interpret(self, raw: RawOutput) -> GradeResult:
        line = raw.score_line.strip()

        if not SCORE_PATTERN.fullmatch(line):
            logger.warning("score_unparseable", score_line=line[:200], exit_code=raw.exit_code)
            return GradeResult.parse_failure(f"unparseable_score_line: {line[:200]!r}")

        return GradeResult.scored(int(line))
