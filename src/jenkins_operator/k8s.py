"""Kubernetes client helpers."""

import base64
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from . import crd
from .models import Jenkins
from .result import ReconcileError

logger = logging.getLogger(__name__)

# Initialize clients
_v1 = None
_custom_api = None


def init_clients():
    """Initialize Kubernetes clients."""
    global _v1, _custom_api

    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except ConfigException:
        config.load_kube_config()
        logger.info("Loaded kubeconfig")

    _v1 = client.CoreV1Api()
    _custom_api = client.CustomObjectsApi()

    return _v1, _custom_api


def get_clients():
    """Get initialized Kubernetes clients."""
    global _v1, _custom_api
    if _v1 is None or _custom_api is None:
        init_clients()
    return _v1, _custom_api


class UpdateTag(Enum):
    SUCCESS = "success"
    CONFLICT = "conflict"
    ERROR = "error"


@dataclass
class UpdateResult:
    """Outcome of persisting a Jenkins CR."""

    tag: UpdateTag
    error: Optional[Exception] = None

    @property
    def ok(self):
        return self.tag is UpdateTag.SUCCESS


class JenkinsApi:
    """Reads and writes Jenkins CRs and the objects the reconciler consults."""

    def __init__(self, v1, custom_api):
        self.v1 = v1
        self.custom_api = custom_api

    def get_jenkins(self, namespace, name):
        """Fetch a Jenkins CR, or None if it no longer exists."""
        try:
            body = self.custom_api.get_namespaced_custom_object(
                group=crd.GROUP,
                version=crd.VERSION,
                namespace=namespace,
                plural=crd.PLURAL,
                name=name,
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise ReconcileError("get Jenkins", f"{namespace}/{name}", e) from e
        return Jenkins.from_dict(body)

    def update_jenkins(self, jenkins):
        """
        Replace the Jenkins CR with ``jenkins``.

        The body carries the resourceVersion it was read at, so a concurrent
        write turns into a 409 and comes back tagged CONFLICT. On success the
        new resourceVersion is adopted so further updates in the same pass
        do not conflict with our own write.
        """
        try:
            body = self.custom_api.replace_namespaced_custom_object(
                group=crd.GROUP,
                version=crd.VERSION,
                namespace=jenkins.namespace,
                plural=crd.PLURAL,
                name=jenkins.name,
                body=jenkins.to_dict(),
            )
        except ApiException as e:
            if e.status == 409:
                return UpdateResult(UpdateTag.CONFLICT, e)
            return UpdateResult(UpdateTag.ERROR, e)

        if isinstance(body, dict):
            jenkins.raw = body
            jenkins.resource_version = (body.get("metadata") or {}).get(
                "resourceVersion", jenkins.resource_version
            )
        return UpdateResult(UpdateTag.SUCCESS)

    def get_config_map(self, namespace, name):
        """Return the data of a config map."""
        try:
            config_map = self.v1.read_namespaced_config_map(
                name=name, namespace=namespace
            )
        except ApiException as e:
            raise ReconcileError("get config map", f"{namespace}/{name}", e) from e
        return dict(config_map.data or {})


class KubernetesSecretStore:
    """Secret lookups for seed job validation."""

    def __init__(self, v1):
        self.v1 = v1

    def get(self, namespace, name):
        """
        Return the decoded data of a secret, or None if it does not exist.

        Raises:
            ReconcileError: If the API server could not be asked
        """
        try:
            secret = self.v1.read_namespaced_secret(name=name, namespace=namespace)
        except ApiException as e:
            if e.status == 404:
                return None
            raise ReconcileError("get secret", f"{namespace}/{name}", e) from e

        return {
            key: base64.b64decode(value)
            for key, value in (secret.data or {}).items()
        }
