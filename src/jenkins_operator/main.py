"""Main operator entrypoint using Kopf."""

import logging

import kopf

from . import crd
from .config import get_config
from .events import EventRecorder
from .k8s import JenkinsApi, KubernetesSecretStore, get_clients
from .provisioners import ProvisionersNotFound, load_provisioners
from .reconcile import JenkinsReconciler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

_reconciler = None


def build_reconciler(config):
    """Wire the reconciler to the cluster and the installed provisioners."""
    v1, custom_api = get_clients()
    api = JenkinsApi(v1, custom_api)
    try:
        provisioners = load_provisioners(config.provisioners, api=api)
    except ProvisionersNotFound as e:
        raise kopf.PermanentError(str(e))
    return JenkinsReconciler(
        api=api,
        secrets=KubernetesSecretStore(v1),
        recorder=EventRecorder(v1),
        provisioners=provisioners,
        config=config,
    )


def get_reconciler():
    global _reconciler
    if _reconciler is None:
        _reconciler = build_reconciler(get_config())
    return _reconciler


def run_reconcile(namespace, name):
    """Run one reconcile pass and translate the result for Kopf."""
    result = get_reconciler().reconcile(namespace, name)
    if result.requeue:
        raise kopf.TemporaryError(
            f"Requeue Jenkins {namespace}/{name}", delay=result.requeue_after
        )


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **kwargs):
    """Apply operator configuration before any handler runs."""
    config = get_config()
    logging.getLogger().setLevel(config.log_level_value)
    settings.posting.level = config.log_level_value
    get_reconciler()
    logger.info(
        f"Jenkins operator started (provisioners={config.provisioners}, "
        f"namespace={config.watch_namespace or '*'})"
    )


@kopf.on.create(crd.GROUP, crd.VERSION, crd.PLURAL)
@kopf.on.update(crd.GROUP, crd.VERSION, crd.PLURAL)
@kopf.on.resume(crd.GROUP, crd.VERSION, crd.PLURAL)
def jenkins_handler(name, namespace, **kwargs):
    """Handle Jenkins create/update/resume events."""
    logger.info(f"Handling Jenkins {name} in namespace {namespace}")
    run_reconcile(namespace, name)


@kopf.timer(crd.GROUP, crd.VERSION, crd.PLURAL, interval=get_config().resync_interval)
def jenkins_timer(name, namespace, **kwargs):
    """Periodic reconciliation timer."""
    logger.debug(f"Timer reconciliation for Jenkins {name}")
    run_reconcile(namespace, name)


@kopf.on.delete(crd.GROUP, crd.VERSION, crd.PLURAL, optional=True)
def jenkins_delete(name, namespace, **kwargs):
    """Handle Jenkins deletion."""
    logger.info(f"Jenkins {name} deleted")
    # Kubernetes owner references will handle cleanup of the master pod,
    # services and config maps


if __name__ == "__main__":
    namespace = get_config().watch_namespace
    if namespace:
        kopf.run(namespaces=[namespace])
    else:
        kopf.run(clusterwide=True)
