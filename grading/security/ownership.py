from loguru import logger
from sqlalchemy.orm import Session

from grading.models.database import Assignment, Subject


class SubjectOwnershipPolicy:
    """An assignment belongs to the teacher of the subject it was created in."""

    def __init__(self, session: Session):
        self.session = session

    def is_owner(self, teacher_email: str, assignment_id: int) -> bool:
        owner = self.session.query(Subject.teacher_email).join(
            Assignment, Assignment.subject_id == Subject.id
        ).filter(
            Assignment.id == assignment_id
        ).scalar()

        if owner is None:
            logger.debug("ownership_unknown_assignment", assignment_id=assignment_id)
            return False
        return owner == teacher_email
