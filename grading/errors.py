from grading.models.results import FailureReason


class GradingError(Exception):
    reason: FailureReason = FailureReason.INTERNAL


class NotOwnerError(GradingError):
    reason = FailureReason.NOT_OWNER


class AssignmentNotFoundError(GradingError):
    reason = FailureReason.ASSIGNMENT_NOT_FOUND


class ConfigurationError(GradingError):
    reason = FailureReason.CONFIGURATION


class FilesystemError(GradingError):
    reason = FailureReason.FILESYSTEM


class StagingError(GradingError):
    reason = FailureReason.STAGING


class UnsupportedLanguageError(GradingError):
    reason = FailureReason.UNSUPPORTED_LANGUAGE


class ExecutionError(GradingError):
    reason = FailureReason.EXECUTION


class ExecutionTimeout(ExecutionError):
    reason = FailureReason.TIMEOUT


class GradingCancelled(GradingError):
    reason = FailureReason.CANCELLED


class PersistenceError(GradingError):
    reason = FailureReason.PERSISTENCE
