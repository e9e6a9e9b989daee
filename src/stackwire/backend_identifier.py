"""Derivation of :class:`BackendIdentifier` values and the names built from them."""

import hashlib
from typing import Union

from stackwire.deployment import DeploymentUnit
from stackwire.domain import DEPLOYMENT_TYPES, BackendIdentifier
from stackwire.errors import InvalidDeploymentTypeError

__all__ = [
    "BACKEND_NAMESPACE_CONTEXT_KEY",
    "BACKEND_NAME_CONTEXT_KEY",
    "DEPLOYMENT_TYPE_CONTEXT_KEY",
    "get_backend_identifier",
    "to_stack_name",
    "to_parameter_prefix",
    "to_parameter_full_path",
    "to_resource_reference_path",
    "backend_hash",
]

BACKEND_NAMESPACE_CONTEXT_KEY = "stackwire-backend-namespace"
BACKEND_NAME_CONTEXT_KEY = "stackwire-backend-name"
DEPLOYMENT_TYPE_CONTEXT_KEY = "stackwire-deployment-type"

PARAMETER_ROOT = "/stackwire"
SHARED_PARAMETER_SEGMENT = "shared"
RESOURCE_REFERENCE_SEGMENT = "resource_reference"

_STACK_NAME_PREFIX = "stackwire"
_MAX_STACK_NAME_LENGTH = 128
_HASH_LENGTH = 10


def get_backend_identifier(scope: DeploymentUnit) -> BackendIdentifier:
    """Read the backend identifier from the context of ``scope`` or its ancestors.

    Raises:
        MissingContextError: If any of the identifier context keys is missing.
        InvalidDeploymentTypeError: If the deployment type is not recognised.
    """
    namespace = scope.get_context(BACKEND_NAMESPACE_CONTEXT_KEY)
    name = scope.get_context(BACKEND_NAME_CONTEXT_KEY)
    deployment_type = scope.get_context(DEPLOYMENT_TYPE_CONTEXT_KEY)
    if deployment_type not in DEPLOYMENT_TYPES:
        raise InvalidDeploymentTypeError(
            f"Invalid deployment type '{deployment_type}', "
            f"expected one of {list(DEPLOYMENT_TYPES)}"
        )
    return BackendIdentifier(namespace, name, deployment_type)


def backend_hash(backend_id: BackendIdentifier) -> str:
    digest = hashlib.sha512(f"{backend_id.namespace}-{backend_id.name}".encode("utf-8"))
    return digest.hexdigest()[:_HASH_LENGTH]


def to_stack_name(backend_id: BackendIdentifier) -> str:
    """Build the name of the main stack for a backend.

    Namespace and name are truncated evenly so that the result never exceeds
    the provider's limit on stack name length.

    Example:
        >>> to_stack_name(BackendIdentifier("shop", "main", "branch"))
        'stackwire-shop-main-branch-<10 hex chars>'
    """
    fixed_length = len(_STACK_NAME_PREFIX) + len(backend_id.type) + _HASH_LENGTH + 4
    budget = (_MAX_STACK_NAME_LENGTH - fixed_length) // 2
    namespace = backend_id.namespace[:budget]
    name = backend_id.name[:budget]
    return "-".join(
        [_STACK_NAME_PREFIX, namespace, name, backend_id.type, backend_hash(backend_id)]
    )


def to_parameter_prefix(backend_id: Union[BackendIdentifier, str]) -> str:
    if isinstance(backend_id, str):
        return f"{PARAMETER_ROOT}/{SHARED_PARAMETER_SEGMENT}/{backend_id}"
    return f"{PARAMETER_ROOT}/{backend_id.namespace}/{backend_id.name}"


def to_parameter_full_path(
    backend_id: Union[BackendIdentifier, str], parameter_name: str
) -> str:
    """Full parameter path for a backend, or for a namespace-wide shared value.

    Example:
        >>> to_parameter_full_path(BackendIdentifier("shop", "main", "branch"), "apiKey")
        '/stackwire/shop/main/apiKey'
        >>> to_parameter_full_path("shop", "apiKey")
        '/stackwire/shared/shop/apiKey'
    """
    return f"{to_parameter_prefix(backend_id)}/{parameter_name}"


def to_resource_reference_path(backend_id: BackendIdentifier, reference_name: str) -> str:
    return (
        f"{PARAMETER_ROOT}/{RESOURCE_REFERENCE_SEGMENT}/"
        f"{backend_id.namespace}/{backend_id.name}/{reference_name}"
    )
