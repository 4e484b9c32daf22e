"""Reconcile outcomes and errors."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ReconcileResult:
    """What the caller should do after a reconcile pass."""

    requeue: bool = False
    requeue_after: float = 0

    @classmethod
    def done(cls):
        return cls()

    @classmethod
    def requeue_now(cls):
        return cls(requeue=True, requeue_after=0)

    @classmethod
    def requeue_in(cls, delay):
        return cls(requeue=True, requeue_after=delay)


class ReconcileError(Exception):
    """An unclassified failure, wrapped with the operation and object it hit."""

    def __init__(self, operation, key, cause=None):
        self.operation = operation
        self.key = key
        self.cause = cause
        message = f"{operation} failed for {key}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class ConflictError(ReconcileError):
    """The object changed under us; re-read it and try again."""
