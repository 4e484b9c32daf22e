"""Unit tests for k8s.py - Kubernetes adapters."""

import base64
from unittest.mock import MagicMock

import pytest
from kubernetes.client.rest import ApiException

from jenkins_operator import crd
from jenkins_operator.k8s import JenkinsApi, KubernetesSecretStore, UpdateTag
from jenkins_operator.result import ReconcileError


@pytest.fixture
def v1():
    return MagicMock()


@pytest.fixture
def custom_api():
    return MagicMock()


@pytest.fixture
def api(v1, custom_api):
    return JenkinsApi(v1, custom_api)


class TestGetJenkins:
    def test_found(self, api, custom_api, sample_body):
        custom_api.get_namespaced_custom_object.return_value = sample_body
        jenkins = api.get_jenkins("ci", "example")
        assert jenkins.key == "ci/example"
        custom_api.get_namespaced_custom_object.assert_called_once_with(
            group=crd.GROUP,
            version=crd.VERSION,
            namespace="ci",
            plural=crd.PLURAL,
            name="example",
        )

    def test_not_found(self, api, custom_api):
        custom_api.get_namespaced_custom_object.side_effect = ApiException(status=404)
        assert api.get_jenkins("ci", "example") is None

    def test_other_error_wrapped(self, api, custom_api):
        error = ApiException(status=500, reason="Internal Server Error")
        custom_api.get_namespaced_custom_object.side_effect = error
        with pytest.raises(ReconcileError) as exc_info:
            api.get_jenkins("ci", "example")
        assert exc_info.value.operation == "get Jenkins"
        assert exc_info.value.key == "ci/example"
        assert exc_info.value.__cause__ is error


class TestUpdateJenkins:
    def test_success_adopts_resource_version(self, api, custom_api, sample_jenkins):
        response = sample_jenkins.to_dict()
        response["metadata"]["resourceVersion"] = "101"
        custom_api.replace_namespaced_custom_object.return_value = response

        result = api.update_jenkins(sample_jenkins)

        assert result.tag is UpdateTag.SUCCESS
        assert result.ok
        assert sample_jenkins.resource_version == "101"
        body = custom_api.replace_namespaced_custom_object.call_args.kwargs["body"]
        assert body["metadata"]["resourceVersion"] == "100"

    def test_conflict(self, api, custom_api, sample_jenkins):
        custom_api.replace_namespaced_custom_object.side_effect = ApiException(
            status=409, reason="Conflict"
        )
        result = api.update_jenkins(sample_jenkins)
        assert result.tag is UpdateTag.CONFLICT
        assert not result.ok
        assert sample_jenkins.resource_version == "100"

    def test_error(self, api, custom_api, sample_jenkins):
        error = ApiException(status=422, reason="Unprocessable Entity")
        custom_api.replace_namespaced_custom_object.side_effect = error
        result = api.update_jenkins(sample_jenkins)
        assert result.tag is UpdateTag.ERROR
        assert result.error is error


class TestGetConfigMap:
    def test_data(self, api, v1):
        v1.read_namespaced_config_map.return_value = MagicMock(
            data={"1-configure-theme.groovy": "println 'hi'"}
        )
        assert api.get_config_map("ci", "scripts") == {
            "1-configure-theme.groovy": "println 'hi'"
        }

    def test_empty(self, api, v1):
        v1.read_namespaced_config_map.return_value = MagicMock(data=None)
        assert api.get_config_map("ci", "scripts") == {}

    def test_missing_is_an_error(self, api, v1):
        v1.read_namespaced_config_map.side_effect = ApiException(status=404)
        with pytest.raises(ReconcileError):
            api.get_config_map("ci", "scripts")


class TestKubernetesSecretStore:
    def test_decodes_data(self, v1):
        v1.read_namespaced_secret.return_value = MagicMock(
            data={"privateKey": base64.b64encode(b"key material").decode()}
        )
        store = KubernetesSecretStore(v1)
        assert store.get("ci", "deploy-key") == {"privateKey": b"key material"}
        v1.read_namespaced_secret.assert_called_once_with(
            name="deploy-key", namespace="ci"
        )

    def test_not_found(self, v1):
        v1.read_namespaced_secret.side_effect = ApiException(status=404)
        assert KubernetesSecretStore(v1).get("ci", "deploy-key") is None

    def test_unreachable(self, v1):
        v1.read_namespaced_secret.side_effect = ApiException(status=503)
        with pytest.raises(ReconcileError):
            KubernetesSecretStore(v1).get("ci", "deploy-key")
