"""Phase completion tracking on the Jenkins status."""

from datetime import datetime, timezone
from enum import Enum

from . import crd


class Phase(Enum):
    BASE = "base"
    USER = "user"

    @property
    def attribute(self):
        return _ATTRIBUTES[self]

    @property
    def reason(self):
        return _REASONS[self]


_ATTRIBUTES = {
    Phase.BASE: "base_configuration_completed_time",
    Phase.USER: "user_configuration_completed_time",
}

_REASONS = {
    Phase.BASE: crd.REASON_BASE_CONFIGURATION_SUCCESS,
    Phase.USER: crd.REASON_USER_CONFIGURATION_SUCCESS,
}


def completed_at(status, phase):
    return getattr(status, phase.attribute)


def mark_once(status, phase, now=None):
    """
    Stamp the completion time of ``phase`` unless it is already set.

    Returns True only on the call that stamped it; the caller then persists
    the status and emits the success event. The check runs against the
    status fetched for this pass, so a lost update fires again next time.
    """
    if completed_at(status, phase) is not None:
        return False
    setattr(status, phase.attribute, now or datetime.now(timezone.utc))
    return True


def phase_duration(status, phase):
    """Time from provisioning start to phase completion, if both are known."""
    finished = completed_at(status, phase)
    if finished is None or status.provision_start_time is None:
        return None
    return finished - status.provision_start_time
