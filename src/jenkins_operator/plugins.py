"""Jenkins plugin declarations and dependency verification."""

import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Tuple

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[0-9a-z_-]+$", re.IGNORECASE)
VERSION_PATTERN = re.compile(r"^[0-9.]+$")

# Plugins the operator itself relies on, with their pinned dependencies
BASE_PLUGINS = {
    "configuration-as-code:1.4": [
        "configuration-as-code-support:1.4",
    ],
    "git:3.9.1": [
        "credentials:2.1.18",
        "git-client:2.7.3",
        "mailer:1.22",
        "matrix-project:1.13",
        "scm-api:2.3.0",
        "ssh-credentials:1.14",
        "structs:1.17",
        "workflow-scm-step:2.7",
        "workflow-step-api:2.16",
    ],
    "job-dsl:1.70": [
        "script-security:1.49",
        "structs:1.17",
    ],
    "kubernetes:1.13.8": [
        "credentials:2.1.18",
        "durable-task:1.26",
        "jackson2-api:2.9.8",
        "kubernetes-credentials:0.4.0",
        "plain-credentials:1.5",
        "structs:1.17",
        "variant:1.1",
        "workflow-step-api:2.16",
    ],
    "workflow-job:2.31": [
        "scm-api:2.3.0",
        "script-security:1.49",
        "structs:1.17",
        "workflow-api:2.33",
        "workflow-step-api:2.16",
        "workflow-support:3.0",
    ],
}


class InvalidPluginError(ValueError):
    """Raised when a plugin token is not of the form ``name:version``."""


class PluginOrigin(Enum):
    """Which part of the spec a plugin declaration came from."""

    OPERATOR = "operatorPlugins"
    USER = "plugins"


@dataclass(frozen=True)
class Plugin:
    name: str
    version: str

    @classmethod
    def parse(cls, name_with_version: str) -> "Plugin":
        parts = name_with_version.split(":", 1)
        if len(parts) != 2:
            raise InvalidPluginError(
                f"invalid plugin format '{name_with_version}', "
                f"must follow pattern 'plugin-name:version'"
            )
        name, version = parts
        if not NAME_PATTERN.match(name):
            raise InvalidPluginError(f"invalid plugin name '{name_with_version}'")
        if not VERSION_PATTERN.match(version):
            raise InvalidPluginError(f"invalid plugin version '{name_with_version}'")
        return cls(name=name, version=version)

    def __str__(self) -> str:
        return f"{self.name}:{self.version}"


PluginGraph = Dict[Plugin, List[Plugin]]


def ingest(
    declarations: Mapping[PluginOrigin, Mapping[str, List[str]]],
    log: logging.Logger = logger,
) -> Tuple[PluginGraph, List[str]]:
    """
    Parse plugin declarations from every origin into one dependency graph.

    Parsing never stops at the first bad token; every error is logged and
    returned so all of them can be reported in one pass. A root declared
    under more than one origin keeps the dependents of every declaration.

    Returns:
        Tuple of (graph, errors)
    """
    graph: PluginGraph = {}
    errors: List[str] = []

    for origin, plugins in declarations.items():
        for root_name, dependent_names in (plugins or {}).items():
            root = None
            try:
                root = Plugin.parse(root_name)
            except InvalidPluginError:
                message = f"Invalid root plugin name '{root_name}' in {origin.value}"
                log.warning(message)
                errors.append(message)

            dependents = []
            for dependent_name in dependent_names or []:
                try:
                    dependents.append(Plugin.parse(dependent_name))
                except InvalidPluginError:
                    message = (
                        f"Invalid dependent plugin name '{dependent_name}' "
                        f"in root plugin '{root_name}' in {origin.value}"
                    )
                    log.warning(message)
                    errors.append(message)

            if root is not None:
                graph.setdefault(root, []).extend(dependents)

    return graph, errors


def verify_dependencies(graph: PluginGraph, log: logging.Logger = logger) -> bool:
    """
    Check that no two declarations require different versions of a plugin.

    Every root and every dependent is an edge owned by its root; edges are
    grouped by plugin name and any version disagreement inside a group is a
    conflict.
    """
    required: Dict[str, List[Tuple[str, Plugin]]] = defaultdict(list)
    for root, dependents in graph.items():
        required[root.name].append((root.version, root))
        for dependent in dependents:
            required[dependent.name].append((dependent.version, root))

    valid = True
    for plugin_name in sorted(required):
        edges = required[plugin_name]
        if len({version for version, _ in edges}) <= 1:
            continue
        valid = False
        reported = set()
        for first_version, first_root in edges:
            for second_version, second_root in edges:
                if first_version == second_version:
                    continue
                pair = frozenset([(first_version, first_root), (second_version, second_root)])
                if pair in reported:
                    continue
                reported.add(pair)
                log.warning(
                    f"Plugin '{first_root}' requires version '{first_version}' "
                    f"but plugin '{second_root}' requires '{second_version}' "
                    f"for plugin '{plugin_name}'"
                )
    return valid


def validate_plugins(
    declarations: Mapping[PluginOrigin, Mapping[str, List[str]]],
    log: logging.Logger = logger,
) -> bool:
    """Parse and verify plugin declarations; False on any error or conflict."""
    graph, errors = ingest(declarations, log)
    if errors:
        return False
    return verify_dependencies(graph, log)
