"""Typed view over the Jenkins custom resource."""

import copy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from . import crd


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    """Format a datetime as RFC 3339 UTC, the way the API server does."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0).isoformat() + "Z"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp into an aware UTC datetime."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class SecretKeySelector:
    name: str
    key: str


@dataclass
class PrivateKey:
    secret_key_ref: Optional[SecretKeySelector] = None


@dataclass
class SeedJob:
    id: str = ""
    description: str = ""
    targets: str = ""
    repository_branch: str = ""
    repository_url: str = ""
    private_key: PrivateKey = field(default_factory=PrivateKey)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SeedJob":
        ref = (data.get("privateKey") or {}).get("secretKeyRef")
        return cls(
            id=data.get("id") or "",
            description=data.get("description") or "",
            targets=data.get("targets") or "",
            repository_branch=data.get("repositoryBranch") or "",
            repository_url=data.get("repositoryUrl") or "",
            private_key=PrivateKey(
                secret_key_ref=SecretKeySelector(
                    name=ref.get("name") or "", key=ref.get("key") or ""
                )
                if ref
                else None
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "description": self.description,
            "targets": self.targets,
            "repositoryBranch": self.repository_branch,
            "repositoryUrl": self.repository_url,
        }
        ref = self.private_key.secret_key_ref
        if ref is not None:
            data["privateKey"] = {"secretKeyRef": {"name": ref.name, "key": ref.key}}
        return data


@dataclass
class MasterSpec:
    # None means unset and gets defaulted; an empty string is kept and rejected
    image: Optional[str] = None
    operator_plugins: Dict[str, List[str]] = field(default_factory=dict)
    plugins: Dict[str, List[str]] = field(default_factory=dict)
    resources: Dict[str, Dict[str, str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MasterSpec":
        return cls(
            image=data.get("image"),
            operator_plugins=copy.deepcopy(data.get("operatorPlugins") or {}),
            plugins=copy.deepcopy(data.get("plugins") or {}),
            resources=copy.deepcopy(data.get("resources") or {}),
        )


@dataclass
class JenkinsSpec:
    master: MasterSpec = field(default_factory=MasterSpec)
    seed_jobs: List[SeedJob] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JenkinsSpec":
        return cls(
            master=MasterSpec.from_dict(data.get("master") or {}),
            seed_jobs=[SeedJob.from_dict(s) for s in data.get("seedJobs") or []],
        )


@dataclass
class JenkinsStatus:
    provision_start_time: Optional[datetime] = None
    base_configuration_completed_time: Optional[datetime] = None
    user_configuration_completed_time: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JenkinsStatus":
        return cls(
            provision_start_time=parse_timestamp(data.get("provisionStartTime")),
            base_configuration_completed_time=parse_timestamp(
                data.get("baseConfigurationCompletedTime")
            ),
            user_configuration_completed_time=parse_timestamp(
                data.get("userConfigurationCompletedTime")
            ),
        )


@dataclass
class Jenkins:
    """
    A Jenkins custom resource as fetched from the API server.

    Only the fields the reconciler reads are typed; everything else is kept
    in ``raw`` and written back untouched by ``to_dict``.
    """

    namespace: str
    name: str
    resource_version: Optional[str] = None
    uid: Optional[str] = None
    spec: JenkinsSpec = field(default_factory=JenkinsSpec)
    status: JenkinsStatus = field(default_factory=JenkinsStatus)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, body: Dict[str, Any]) -> "Jenkins":
        metadata = body.get("metadata") or {}
        return cls(
            namespace=metadata.get("namespace", ""),
            name=metadata.get("name", ""),
            resource_version=metadata.get("resourceVersion"),
            uid=metadata.get("uid"),
            spec=JenkinsSpec.from_dict(body.get("spec") or {}),
            status=JenkinsStatus.from_dict(body.get("status") or {}),
            raw=copy.deepcopy(body),
        )

    def to_dict(self) -> Dict[str, Any]:
        body = copy.deepcopy(self.raw)
        body.setdefault("apiVersion", crd.API_VERSION)
        body.setdefault("kind", crd.KIND)

        metadata = body.setdefault("metadata", {})
        metadata["namespace"] = self.namespace
        metadata["name"] = self.name
        if self.resource_version is not None:
            metadata["resourceVersion"] = self.resource_version

        spec = body.setdefault("spec", {})
        master = spec.setdefault("master", {})
        if self.spec.master.image is not None:
            master["image"] = self.spec.master.image
        master["operatorPlugins"] = copy.deepcopy(self.spec.master.operator_plugins)
        master["plugins"] = copy.deepcopy(self.spec.master.plugins)
        master["resources"] = copy.deepcopy(self.spec.master.resources)
        if self.spec.seed_jobs or "seedJobs" in spec:
            spec["seedJobs"] = [s.to_dict() for s in self.spec.seed_jobs]

        status = body.setdefault("status", {})
        for key, value in (
            ("provisionStartTime", self.status.provision_start_time),
            (
                "baseConfigurationCompletedTime",
                self.status.base_configuration_completed_time,
            ),
            (
                "userConfigurationCompletedTime",
                self.status.user_configuration_completed_time,
            ),
        ):
            if value is not None:
                status[key] = format_timestamp(value)
        return body

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"
