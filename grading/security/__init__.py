from grading.security.file_validator import SourceFileValidator
from grading.security.ownership import SubjectOwnershipPolicy

__all__ = [
    "SourceFileValidator",
    "SubjectOwnershipPolicy",
]
