"""Retry policy for seed job builds."""

import logging
from enum import Enum

from .result import ReconcileError, ReconcileResult

logger = logging.getLogger(__name__)

DEFAULT_REQUEUE_DELAY = 10


class SeedJobOutcome(Enum):
    """What the seed job runner reports after triggering or polling builds."""

    DONE = "done"
    PENDING = "pending"
    BUILD_FAILED = "build_failed"
    BUILD_FAILED_UNRECOVERABLE = "build_failed_unrecoverable"


class Classification(Enum):
    DONE = "done"
    PENDING = "pending"
    RECOVERABLE = "recoverable"
    UNRECOVERABLE = "unrecoverable"
    INFRASTRUCTURE_ERROR = "infrastructure_error"


_OUTCOME_CLASSIFICATION = {
    SeedJobOutcome.DONE: Classification.DONE,
    SeedJobOutcome.PENDING: Classification.PENDING,
    SeedJobOutcome.BUILD_FAILED: Classification.RECOVERABLE,
    SeedJobOutcome.BUILD_FAILED_UNRECOVERABLE: Classification.UNRECOVERABLE,
}


def classify(outcome=None, error=None):
    """Classify a seed job runner result or the exception it raised."""
    if error is not None:
        return Classification.INFRASTRUCTURE_ERROR
    try:
        return _OUTCOME_CLASSIFICATION[outcome]
    except KeyError:
        raise ValueError(f"Unknown seed job outcome: {outcome!r}")


class SeedJobRetryPolicy:
    """
    Drives the seed job runner and maps its outcome to a control decision.

    ``ensure`` returns ``None`` when the seed jobs are done and reconciliation
    may proceed, otherwise the ``ReconcileResult`` to hand back to the caller.
    Recoverable build failures are retried after a fixed delay; unrecoverable
    ones stop the pass without a requeue until the spec changes.
    """

    def __init__(self, requeue_delay=DEFAULT_REQUEUE_DELAY, log=logger):
        self.requeue_delay = requeue_delay
        self.logger = log

    def ensure(self, runner, jenkins):
        outcome, error = None, None
        try:
            outcome = runner.ensure_seed_jobs(jenkins)
        except ReconcileError:
            raise
        except Exception as e:
            error = e

        classification = classify(outcome, error)

        if classification is Classification.INFRASTRUCTURE_ERROR:
            raise ReconcileError("ensure seed jobs", jenkins.key, error) from error

        if classification is Classification.DONE:
            return None

        if classification is Classification.PENDING:
            self.logger.info("Seed jobs are not ready yet")
            return ReconcileResult.requeue_in(self.requeue_delay)

        if classification is Classification.RECOVERABLE:
            self.logger.warning(
                f"Seed job build failed, retrying in {self.requeue_delay}s"
            )
            return ReconcileResult.requeue_in(self.requeue_delay)

        self.logger.warning(
            "Seed job build failed and cannot be recovered, "
            "please correct the seed job configuration in Jenkins CR"
        )
        return ReconcileResult.done()
