"""Validation of the Jenkins CR spec."""

import logging
import re

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from . import crd
from .plugins import PluginOrigin, validate_plugins

logger = logging.getLogger(__name__)

# Docker distribution reference grammar
_ALPHA_NUMERIC = r"[a-z0-9]+"
_SEPARATOR = r"(?:[._]|__|[-]+)"
_NAME_COMPONENT = rf"{_ALPHA_NUMERIC}(?:{_SEPARATOR}{_ALPHA_NUMERIC})*"
_DOMAIN_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
_DOMAIN = rf"{_DOMAIN_COMPONENT}(?:\.{_DOMAIN_COMPONENT})*(?::[0-9]+)?"
_TAG = r"[\w][\w.-]{0,127}"
_DIGEST = r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9A-Fa-f]{32,}"
_NAME = rf"(?:{_DOMAIN}/)?{_NAME_COMPONENT}(?:/{_NAME_COMPONENT})*"

TAG_PATTERN = re.compile(rf"^{_TAG}$")
REFERENCE_PATTERN = re.compile(rf"^{_NAME}(?::{_TAG})?(?:@{_DIGEST})?$")

PEM_BLOCK_PATTERN = re.compile(
    rb"-----BEGIN (?P<label>[A-Z0-9 ]+)-----\r?\n.*?-----END (?P=label)-----",
    re.DOTALL,
)
PKCS1_LABEL = b"RSA PRIVATE KEY"


class InvalidPrivateKeyError(ValueError):
    """Raised when a deploy key is not a usable PKCS#1 RSA private key."""


def is_valid_image(image):
    """Check an image against the bare tag or full reference grammar."""
    return bool(TAG_PATTERN.match(image) or REFERENCE_PATTERN.match(image))


def validate_base(jenkins, log=logger):
    """Validate the spec.master section."""
    image = jenkins.spec.master.image
    if not image:
        log.warning("Image not set")
        return False

    if not is_valid_image(image):
        log.warning(f"Invalid image '{image}'")
        return False

    declarations = {
        PluginOrigin.OPERATOR: jenkins.spec.master.operator_plugins,
        PluginOrigin.USER: jenkins.spec.master.plugins,
    }
    if not validate_plugins(declarations, log):
        return False

    return True


def validate_private_key(private_key):
    """
    Check that ``private_key`` holds a PEM encoded PKCS#1 RSA private key.

    Loading through ``cryptography`` runs the RSA consistency checks, so a
    key with tampered parameters is rejected here as well.

    Raises:
        InvalidPrivateKeyError: If the key cannot be decoded or is invalid
    """
    if isinstance(private_key, str):
        private_key = private_key.encode()

    match = PEM_BLOCK_PATTERN.search(private_key)
    if match is None:
        raise InvalidPrivateKeyError("failed to decode PEM block")
    if match.group("label") != PKCS1_LABEL:
        raise InvalidPrivateKeyError(
            f"unexpected PEM block type '{match.group('label').decode()}'"
        )

    try:
        key = serialization.load_pem_private_key(match.group(0), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise InvalidPrivateKeyError(str(e)) from e

    if not isinstance(key, rsa.RSAPrivateKey):
        raise InvalidPrivateKeyError("not an RSA private key")


def validate_seed_job(seed_job, namespace, secrets, log=logger):
    """
    Validate a single seed job declaration.

    Every problem is logged before returning. Secret store failures other
    than a missing secret propagate to the caller.
    """
    valid = True
    prefix = f"Seed job '{seed_job.id}'"

    if not seed_job.id:
        log.warning(f"{prefix}: seed job id can't be empty")
        valid = False

    ref = seed_job.private_key.secret_key_ref
    if crd.SSH_REPOSITORY_MARKER in seed_job.repository_url and ref is None:
        log.warning(
            f"{prefix}: private key can't be empty while using ssh repository url"
        )
        valid = False

    if ref is None:
        return valid

    data = secrets.get(namespace, ref.name)
    if data is None:
        log.warning(f"{prefix}: secret '{ref.name}' not found")
        return False

    private_key = data.get(ref.key) or b""
    if not private_key:
        log.warning(f"{prefix}: private key '{ref.key}' is empty")
        return False

    try:
        validate_private_key(private_key)
    except InvalidPrivateKeyError as e:
        log.warning(f"{prefix}: private key is invalid: {e}")
        valid = False

    return valid


def validate_user(jenkins, secrets, log=logger):
    """Validate the user configuration part of the spec (seed jobs)."""
    valid = True
    for seed_job in jenkins.spec.seed_jobs:
        if not validate_seed_job(seed_job, jenkins.namespace, secrets, log):
            valid = False
    return valid
