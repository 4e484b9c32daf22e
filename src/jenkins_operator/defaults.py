"""Defaulting of an incomplete Jenkins spec."""

import copy
import logging

from . import crd
from .plugins import BASE_PLUGINS

logger = logging.getLogger(__name__)


def _resources_complete(resources):
    requests = resources.get("requests") or {}
    limits = resources.get("limits") or {}
    return all(
        [
            requests.get("cpu"),
            requests.get("memory"),
            limits.get("cpu"),
            limits.get("memory"),
        ]
    )


def set_defaults(jenkins, log=logger):
    """Fill unset master fields in place. Returns True if anything changed."""
    master = jenkins.spec.master
    changed = False

    if master.image is None:
        log.info(f"Setting default Jenkins master image: {crd.DEFAULT_MASTER_IMAGE}")
        master.image = crd.DEFAULT_MASTER_IMAGE
        changed = True

    if not master.operator_plugins:
        log.info("Setting default base plugins")
        master.operator_plugins = copy.deepcopy(BASE_PLUGINS)
        changed = True

    if not master.plugins:
        log.info("Setting default user plugins")
        master.plugins = copy.deepcopy(crd.DEFAULT_USER_PLUGINS)
        changed = True

    if not _resources_complete(master.resources):
        log.info("Setting default Jenkins master pod resource requirements")
        master.resources = copy.deepcopy(crd.DEFAULT_RESOURCES)
        changed = True

    return changed
