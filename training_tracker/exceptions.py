"""Error taxonomy raised by the services and rendered by the API layer."""


class TrackerError(Exception):
    """Base class for every error the core reports to its callers"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TrackerError):
    """Referenced edition, task or user does not exist"""
    status_code = 404


class ConflictError(TrackerError):
    """Edition code already taken"""
    status_code = 409


class ValidationError(TrackerError):
    """Missing or malformed field"""
    status_code = 400


class StorageError(TrackerError):
    """Persistence layer failed; the session has been rolled back"""
    status_code = 500


class TransactionFailure(StorageError):
    """A multi-row write failed part way and was rolled back"""
