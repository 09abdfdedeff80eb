from pathlib import Path
from typing import List

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from grading.errors import AssignmentNotFoundError, PersistenceError
from grading.models.database import Assignment, Submission


class AssignmentRepository:
    def __init__(self, session: Session):
        self.session = session

    def find_assignment(self, assignment_id: int) -> Assignment:
        assignment = self.session.query(Assignment).filter(Assignment.id == assignment_id).first()
        if not assignment:
            raise AssignmentNotFoundError(f"assignment_not_found: {assignment_id}")
        return assignment

    def find_submissions_for_assignment(self, assignment_id: int) -> List[Submission]:
        return self.session.query(Submission).filter(
            Submission.assignment_id == assignment_id
        ).order_by(Submission.id).all()

    def save_submission(self, submission: Submission) -> Submission:
        try:
            self.session.add(submission)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(f"submission_save_failed: {submission.id}: {e}") from e
        logger.info(
            "submission_saved",
            submission_id=submission.id,
            status=submission.status,
            score=submission.score,
        )
        return submission

    def delete_assignment(self, assignment_id: int) -> None:
        """
        Delete an assignment together with its fixture files.

        Fixture files are only removed once the row is gone. An assignment
        that still has submissions fails with PersistenceError.
        """
        assignment = self.find_assignment(assignment_id)
        fixture_paths = [assignment.input_path, assignment.output_path, assignment.question_path]

        try:
            self.session.delete(assignment)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(f"assignment_delete_failed: {assignment_id}: {e}") from e

        for fixture in fixture_paths:
            path = Path(fixture)
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.error("fixture_delete_failed", assignment_id=assignment_id, path=str(path), error=str(e))

        logger.info("assignment_deleted", assignment_id=assignment_id)
