"""
Storage error taxonomy.

Every error carries the operation it came from. Driver exceptions are kept
as the ``cause`` and chained with ``raise ... from``.
"""
from typing import Optional


class StorageError(Exception):
    """Base class for all storer failures."""

    def __init__(self, op: str, detail: str, cause: Optional[BaseException] = None):
        self.op = op
        self.detail = detail
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.cause is None:
            return f"{self.op}: {self.detail}"
        return f"{self.op}: {self.detail}: {self.cause}"


class WriteFailure(StorageError):
    """An insert, update or delete was rejected by the database."""


class ReadFailure(StorageError):
    """A query or row fetch failed."""


class NotFound(ReadFailure):
    """A single-row fetch matched zero rows."""


class IdentityFailure(StorageError):
    """The generated identifier of an inserted row could not be read back."""


class TransactionFailure(StorageError):
    """Begin, commit or rollback failed."""


class CompoundFailure(TransactionFailure):
    """Work inside a transaction failed and the rollback failed as well."""

    def __init__(self, op: str, original: BaseException, rollback_error: BaseException):
        self.original = original
        self.rollback_error = rollback_error
        super().__init__(op, "rollback failed", rollback_error)

    def __str__(self) -> str:
        return f"{self.original}; rollback also failed: {self.rollback_error}"


class OperationCancelled(StorageError):
    """The call context was cancelled before the operation finished."""


class DeadlineExceeded(OperationCancelled):
    """The call context deadline passed before the operation finished."""
