"""Kubernetes events on Jenkins CRs."""

import logging

from kubernetes.client.rest import ApiException

from .templates import create_event_manifest

logger = logging.getLogger(__name__)


class EventRecorder:
    """
    Posts events to the API server.

    Events are fire-and-forget: a failed post is logged and dropped, it never
    fails the reconcile pass.
    """

    def __init__(self, v1):
        self.v1 = v1

    def emit(self, jenkins, event_type, reason, message):
        event = create_event_manifest(jenkins, event_type, reason, message)
        try:
            self.v1.create_namespaced_event(namespace=jenkins.namespace, body=event)
        except ApiException as e:
            logger.warning(
                f"Could not post {event_type} event '{reason}' for {jenkins.key}: "
                f"{e.status} {e.reason}"
            )
