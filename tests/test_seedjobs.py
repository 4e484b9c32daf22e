"""Unit tests for seedjobs.py - seed job retry policy."""

import pytest
from unittest.mock import MagicMock, patch

from jenkins_operator.result import ConflictError, ReconcileError, ReconcileResult
from jenkins_operator.seedjobs import (
    Classification,
    SeedJobOutcome,
    SeedJobRetryPolicy,
    classify,
)


class TestClassify:
    """Tests for classify."""

    @pytest.mark.parametrize(
        "outcome,expected",
        [
            (SeedJobOutcome.DONE, Classification.DONE),
            (SeedJobOutcome.PENDING, Classification.PENDING),
            (SeedJobOutcome.BUILD_FAILED, Classification.RECOVERABLE),
            (
                SeedJobOutcome.BUILD_FAILED_UNRECOVERABLE,
                Classification.UNRECOVERABLE,
            ),
        ],
    )
    def test_outcomes(self, outcome, expected):
        assert classify(outcome) is expected

    def test_error(self):
        assert (
            classify(error=RuntimeError("connection reset"))
            is Classification.INFRASTRUCTURE_ERROR
        )

    def test_unknown_outcome(self):
        with pytest.raises(ValueError):
            classify("done")


class TestSeedJobRetryPolicy:
    """Tests for SeedJobRetryPolicy.ensure."""

    @pytest.fixture
    def runner(self):
        return MagicMock()

    @pytest.fixture
    def policy(self, mock_logger):
        return SeedJobRetryPolicy(requeue_delay=10, log=mock_logger)

    def test_done_proceeds(self, policy, runner, sample_jenkins):
        runner.ensure_seed_jobs.return_value = SeedJobOutcome.DONE
        assert policy.ensure(runner, sample_jenkins) is None
        runner.ensure_seed_jobs.assert_called_once_with(sample_jenkins)

    def test_pending_requeues(self, policy, runner, sample_jenkins):
        runner.ensure_seed_jobs.return_value = SeedJobOutcome.PENDING
        assert policy.ensure(runner, sample_jenkins) == ReconcileResult.requeue_in(10)

    def test_recoverable_requeues_with_warning(
        self, policy, runner, sample_jenkins, mock_logger
    ):
        runner.ensure_seed_jobs.return_value = SeedJobOutcome.BUILD_FAILED
        result = policy.ensure(runner, sample_jenkins)
        assert result.requeue is True
        assert result.requeue_after == 10
        mock_logger.warning.assert_called_once()

    def test_unrecoverable_stops(self, policy, runner, sample_jenkins, mock_logger):
        runner.ensure_seed_jobs.return_value = SeedJobOutcome.BUILD_FAILED_UNRECOVERABLE
        result = policy.ensure(runner, sample_jenkins)
        assert result == ReconcileResult.done()
        assert result.requeue is False
        mock_logger.warning.assert_called_once()

    def test_infrastructure_error_is_wrapped(
        self, policy, runner, sample_jenkins, mock_logger
    ):
        cause = RuntimeError("jenkins unreachable")
        runner.ensure_seed_jobs.side_effect = cause
        with pytest.raises(ReconcileError) as exc_info:
            policy.ensure(runner, sample_jenkins)
        assert exc_info.value.cause is cause
        assert exc_info.value.__cause__ is cause
        assert "ci/example" in str(exc_info.value)
        mock_logger.warning.assert_not_called()

    def test_runner_error_goes_through_classify(self, policy, runner, sample_jenkins):
        cause = ConnectionError("connection reset")
        runner.ensure_seed_jobs.side_effect = cause
        with patch("jenkins_operator.seedjobs.classify", wraps=classify) as classified:
            with pytest.raises(ReconcileError):
                policy.ensure(runner, sample_jenkins)
        classified.assert_called_once_with(None, cause)

    def test_conflict_passes_through(self, policy, runner, sample_jenkins):
        runner.ensure_seed_jobs.side_effect = ConflictError("update", "ci/example")
        with pytest.raises(ConflictError):
            policy.ensure(runner, sample_jenkins)

    def test_custom_delay(self, runner, sample_jenkins, mock_logger):
        runner.ensure_seed_jobs.return_value = SeedJobOutcome.PENDING
        policy = SeedJobRetryPolicy(requeue_delay=3, log=mock_logger)
        assert policy.ensure(runner, sample_jenkins).requeue_after == 3
