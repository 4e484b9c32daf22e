"""Kubernetes resource templates."""

from datetime import datetime, timezone

from kubernetes import client

from . import crd

COMPONENT = "jenkins-operator"


def create_object_reference(jenkins):
    """Reference to a Jenkins CR for events."""
    return client.V1ObjectReference(
        api_version=crd.API_VERSION,
        kind=crd.KIND,
        name=jenkins.name,
        namespace=jenkins.namespace,
        uid=jenkins.uid,
        resource_version=jenkins.resource_version,
    )


def create_event_manifest(jenkins, event_type, reason, message, now=None):
    """Create an Event manifest attached to a Jenkins CR."""
    now = now or datetime.now(timezone.utc)
    return client.CoreV1Event(
        metadata=client.V1ObjectMeta(
            generate_name=f"{jenkins.name}.",
            namespace=jenkins.namespace,
        ),
        involved_object=create_object_reference(jenkins),
        type=event_type,
        reason=reason,
        message=message,
        count=1,
        first_timestamp=now,
        last_timestamp=now,
        source=client.V1EventSource(component=COMPONENT),
        reporting_component=COMPONENT,
    )
