"""CRD schema constants and helpers."""

# CRD Group, Version, and Kind
GROUP = "jenkins.io"
VERSION = "v1alpha1"
PLURAL = "jenkins"
KIND = "Jenkins"

# API version string
API_VERSION = f"{GROUP}/{VERSION}"

# Event types
EVENT_NORMAL = "Normal"
EVENT_WARNING = "Warning"

# Event reasons
REASON_BASE_CONFIGURATION_SUCCESS = "BaseConfigurationSuccess"
REASON_USER_CONFIGURATION_SUCCESS = "UserConfigurationSuccess"
REASON_CR_VALIDATION_FAILURE = "CRValidationFailure"

# Defaults applied to an incomplete spec
DEFAULT_MASTER_IMAGE = "jenkins/jenkins:lts"
DEFAULT_USER_PLUGINS = {"simple-theme-plugin:0.5.1": []}
DEFAULT_RESOURCES = {
    "requests": {"cpu": "1", "memory": "500Mi"},
    "limits": {"cpu": "1500m", "memory": "3Gi"},
}

# Seed jobs cloned over SSH need a deploy key
SSH_REPOSITORY_MARKER = "git@"

USER_CONFIGURATION_CONFIG_MAP_PREFIX = "jenkins-operator-user-configuration-"
USER_CONFIGURATION_JOB_NAME = "jenkins-operator-user-configuration"


def user_configuration_config_map_name(jenkins_name):
    """Name of the config map holding user groovy scripts."""
    return f"{USER_CONFIGURATION_CONFIG_MAP_PREFIX}{jenkins_name}"
