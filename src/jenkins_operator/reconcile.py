"""Core reconciliation logic."""

import logging

from . import crd
from .completion import Phase, mark_once, phase_duration
from .config import OperatorConfig
from .defaults import set_defaults
from .k8s import UpdateTag
from .result import ConflictError, ReconcileError, ReconcileResult
from .seedjobs import SeedJobRetryPolicy
from .validate import validate_base, validate_user

logger = logging.getLogger(__name__)


class CRLoggerAdapter(logging.LoggerAdapter):
    """Prefixes every message with the Jenkins CR it is about."""

    def process(self, msg, kwargs):
        return f"[{self.extra['cr']}] {msg}", kwargs


def _call(operation, key, fn, *args):
    """Call a collaborator, wrapping anything unexpected with context."""
    try:
        return fn(*args)
    except ReconcileError:
        raise
    except Exception as e:
        raise ReconcileError(operation, key, e) from e


class JenkinsReconciler:
    """
    Drives one Jenkins CR toward its spec, one pass per invocation.

    Nothing is cached between passes: every call fetches the CR again and
    derives its decisions from what the API server returns. Phases run in a
    fixed order (defaults, base validation, base provisioning, user
    validation, seed jobs, groovy scripts) and each one short-circuits the
    pass with a ReconcileResult when it cannot complete yet.
    """

    def __init__(self, api, secrets, recorder, provisioners, config=None, log=logger):
        self.api = api
        self.secrets = secrets
        self.recorder = recorder
        self.provisioners = provisioners
        self.config = config or OperatorConfig()
        self.logger = log

    def build_logger(self, namespace, name):
        return CRLoggerAdapter(self.logger, {"cr": f"{namespace}/{name}"})

    def reconcile(self, namespace, name):
        """
        Reconcile the Jenkins CR ``namespace/name``.

        Conflicts are expected under concurrent writers and are retried
        immediately without a warning. Any other failure is logged and
        retried after ``config.error_requeue_delay``.
        """
        log = self.build_logger(namespace, name)
        log.debug("Reconciling Jenkins")

        try:
            return self._reconcile(namespace, name, log)
        except ConflictError as e:
            log.debug(f"Conflict, requeueing: {e}")
            return ReconcileResult.requeue_now()
        except ReconcileError as e:
            log.warning(f"Reconcile loop failed: {e}", exc_info=self.config.debug)
            return ReconcileResult.requeue_in(self.config.error_requeue_delay)

    def _reconcile(self, namespace, name, log):
        jenkins = self.api.get_jenkins(namespace, name)
        if jenkins is None:
            # Deleted; owned objects are garbage collected by the cluster
            log.debug("Jenkins not found, nothing to do")
            return ReconcileResult.done()

        if set_defaults(jenkins, log):
            result = self._persist(jenkins, "persist defaults", log)
            if result is not None:
                return result

        # Base configuration
        base = _call("create base provisioner", jenkins.key, self.provisioners.base, jenkins, log)

        valid = validate_base(jenkins, log) and _call(
            "validate base configuration", jenkins.key, base.validate, jenkins
        )
        if not valid:
            self.recorder.emit(
                jenkins,
                crd.EVENT_WARNING,
                crd.REASON_CR_VALIDATION_FAILURE,
                "Base CR validation failed",
            )
            log.warning("Validation of base configuration failed, please correct Jenkins CR")
            return ReconcileResult.done()

        base_result = _call("reconcile base configuration", jenkins.key, base.reconcile)
        if base_result.requeue:
            return ReconcileResult.requeue_in(base_result.requeue_after)

        result = self._complete_phase(jenkins, Phase.BASE, log)
        if result is not None:
            return result

        # User configuration
        valid = _call(
            "validate user configuration", jenkins.key, validate_user, jenkins, self.secrets, log
        )
        if not valid:
            log.warning("Validation of user configuration failed, please correct Jenkins CR")
            self.recorder.emit(
                jenkins,
                crd.EVENT_WARNING,
                crd.REASON_CR_VALIDATION_FAILURE,
                "User CR validation failed",
            )
            return ReconcileResult.done()

        jenkins_client = base_result.jenkins_client
        seed_jobs = _call(
            "create seed job runner", jenkins.key, self.provisioners.seed_jobs, jenkins_client, log
        )
        policy = SeedJobRetryPolicy(self.config.requeue_delay, log)
        result = policy.ensure(seed_jobs, jenkins)
        if result is not None:
            return result

        result = self._ensure_user_configuration(jenkins, jenkins_client, log)
        if result is not None:
            return result

        result = self._complete_phase(jenkins, Phase.USER, log)
        if result is not None:
            return result

        return ReconcileResult.done()

    def _ensure_user_configuration(self, jenkins, jenkins_client, log):
        groovy = _call(
            "create groovy runner", jenkins.key, self.provisioners.groovy, jenkins_client, log
        )
        _call("configure groovy job", jenkins.key, groovy.configure_groovy_job)

        config_data = self.api.get_config_map(
            jenkins.namespace, crd.user_configuration_config_map_name(jenkins.name)
        )

        done = _call(
            "ensure groovy job", jenkins.key, groovy.ensure_groovy_job, config_data, jenkins
        )
        if not done:
            log.info("User configuration scripts are not applied yet")
            return ReconcileResult.requeue_in(self.config.requeue_delay)
        return None

    def _persist(self, jenkins, operation, log):
        """Write the CR back. Returns a requeue on conflict, None on success."""
        update = self.api.update_jenkins(jenkins)
        if update.tag is UpdateTag.SUCCESS:
            return None
        if update.tag is UpdateTag.CONFLICT:
            log.debug(f"{operation}: object was modified, requeueing")
            return ReconcileResult.requeue_now()
        raise ReconcileError(operation, jenkins.key, update.error) from update.error

    def _complete_phase(self, jenkins, phase, log):
        """
        Record the first completion of ``phase`` and announce it once.

        The event is only emitted after the timestamp was persisted; a
        conflicting write leaves the status untouched so the next pass
        fires again.
        """
        if not mark_once(jenkins.status, phase):
            return None

        result = self._persist(jenkins, f"persist {phase.value} configuration completion", log)
        if result is not None:
            return result

        duration = phase_duration(jenkins.status, phase)
        if duration is not None:
            log.info(f"{phase.value.capitalize()} configuration phase is complete, took {duration}")
        else:
            log.info(f"{phase.value.capitalize()} configuration phase is complete")

        self.recorder.emit(
            jenkins,
            crd.EVENT_NORMAL,
            phase.reason,
            f"{phase.value.capitalize()} configuration completed",
        )
        return None
