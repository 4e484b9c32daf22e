"""
Provisioner interfaces - the collaborators the reconciler delegates to.

Concrete provisioners build and apply the Jenkins master pod, services and
config maps, talk to the running Jenkins over HTTP and run groovy scripts on
it. They ship as separate packages and are discovered via the
'jenkins_operator.provisioners' entry point group.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from importlib.metadata import entry_points
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "jenkins_operator.provisioners"


@dataclass
class BaseReconcileResult:
    """Result from the base provisioner's reconcile() call."""

    requeue: bool = False
    requeue_after: float = 0
    jenkins_client: Optional[Any] = None


class BaseProvisioner(ABC):
    """Provisions the Jenkins master itself for one Jenkins CR."""

    @abstractmethod
    def validate(self, jenkins) -> bool:
        """Provisioner specific checks on top of the common base validation."""
        pass

    @abstractmethod
    def reconcile(self) -> BaseReconcileResult:
        """
        Drive the master pod and its supporting objects toward the spec.

        Returns:
            BaseReconcileResult carrying a client for the running Jenkins
            once the master is up.
        """
        pass


class SeedJobRunner(ABC):
    @abstractmethod
    def ensure_seed_jobs(self, jenkins):
        """
        Make sure seed jobs exist and their builds have run.

        Returns:
            A SeedJobOutcome. Infrastructure failures are raised.
        """
        pass


class GroovyRunner(ABC):
    """Runs user groovy configuration scripts on the Jenkins master."""

    @abstractmethod
    def configure_groovy_job(self) -> None:
        pass

    @abstractmethod
    def ensure_groovy_job(self, config_data: Dict[str, str], jenkins) -> bool:
        """Apply scripts from ``config_data``; True once all have been applied."""
        pass


class Provisioners(ABC):
    """Factory handing out collaborators bound to one reconcile pass."""

    @abstractmethod
    def base(self, jenkins, logger: logging.Logger) -> BaseProvisioner:
        pass

    @abstractmethod
    def seed_jobs(self, jenkins_client, logger: logging.Logger) -> SeedJobRunner:
        pass

    @abstractmethod
    def groovy(self, jenkins_client, logger: logging.Logger) -> GroovyRunner:
        pass


class ProvisionersNotFound(LookupError):
    pass


def load_provisioners(name: str, **kwargs) -> Provisioners:
    """
    Find and instantiate the provisioners registered under ``name``.

    Args:
        name: Entry point name in the 'jenkins_operator.provisioners' group
        **kwargs: Passed to the provisioners class

    Raises:
        ProvisionersNotFound: If no entry point with that name is installed
    """
    for ep in entry_points(group=ENTRY_POINT_GROUP):
        if ep.name != name:
            continue
        provisioners_class = ep.load()
        logger.info(f"Loaded provisioners '{name}' from {ep.value}")
        return provisioners_class(**kwargs)

    raise ProvisionersNotFound(
        f"No provisioners named '{name}' in entry point group '{ENTRY_POINT_GROUP}'"
    )
