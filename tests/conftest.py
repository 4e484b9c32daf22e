"""Pytest configuration and fixtures."""

import copy
from unittest.mock import MagicMock

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from jenkins_operator.models import Jenkins
from jenkins_operator.plugins import BASE_PLUGINS


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def pkcs1_pem(rsa_key):
    """PEM encoded PKCS#1 ('BEGIN RSA PRIVATE KEY') private key."""
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def pkcs8_pem(rsa_key):
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


class FakeSecretStore:
    """In-memory secret store keyed by (namespace, name)."""

    def __init__(self, secrets=None):
        self.secrets = secrets or {}
        self.calls = []

    def get(self, namespace, name):
        self.calls.append((namespace, name))
        return self.secrets.get((namespace, name))


@pytest.fixture
def secret_store():
    return FakeSecretStore()


@pytest.fixture
def sample_body():
    """A fully defaulted Jenkins CR as returned by the API server."""
    return {
        "apiVersion": "jenkins.io/v1alpha1",
        "kind": "Jenkins",
        "metadata": {
            "name": "example",
            "namespace": "ci",
            "resourceVersion": "100",
            "uid": "1234-abcd",
        },
        "spec": {
            "master": {
                "image": "jenkins/jenkins:lts",
                "operatorPlugins": copy.deepcopy(BASE_PLUGINS),
                "plugins": {"simple-theme-plugin:0.5.1": []},
                "resources": {
                    "requests": {"cpu": "1", "memory": "500Mi"},
                    "limits": {"cpu": "1500m", "memory": "3Gi"},
                },
            },
            "seedJobs": [
                {
                    "id": "jenkins-operator",
                    "targets": "cicd/jobs/*.jenkins",
                    "description": "Jenkins Operator repository",
                    "repositoryBranch": "master",
                    "repositoryUrl": "https://github.com/example/jenkins-jobs.git",
                }
            ],
        },
        "status": {"provisionStartTime": "2024-01-15T10:00:00Z"},
    }


@pytest.fixture
def sample_jenkins(sample_body):
    return Jenkins.from_dict(sample_body)


@pytest.fixture
def mock_logger():
    return MagicMock()
