#!/usr/bin/env python3
import argparse
import json
import sys

from dotenv import load_dotenv
from loguru import logger


def main():
    parser = argparse.ArgumentParser(description="Grade all submissions of an assignment")
    parser.add_argument("assignment_id", type=int, help="Assignment to grade")
    parser.add_argument("--teacher", required=True, help="Email of the teacher requesting grading")
    parser.add_argument("--workers", type=int, default=None, help="Submissions graded concurrently")
    parser.add_argument("--timeout", type=int, default=None, help="Per-container timeout in seconds")
    args = parser.parse_args()

    load_dotenv()

    from config import config
    from grading.errors import AssignmentNotFoundError, ConfigurationError, NotOwnerError
    from grading.service import grade_assignment

    overrides = {}
    if args.workers is not None:
        overrides["grading_max_workers"] = args.workers
    if args.timeout is not None:
        overrides["grading_run_timeout_seconds"] = args.timeout
    settings = config.model_copy(update=overrides)

    logger.info("starting_grading", assignment_id=args.assignment_id, teacher=args.teacher)

    try:
        report = grade_assignment(args.assignment_id, args.teacher, settings=settings)
    except (NotOwnerError, AssignmentNotFoundError, ConfigurationError) as e:
        logger.error("grading_rejected", assignment_id=args.assignment_id, error=str(e))
        sys.exit(2)

    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()
