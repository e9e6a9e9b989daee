"""Secret resolution scoped to a deployment unit and backend.

Secrets are never read while the graph is built. Resolving a secret records
a fetcher resource in the unit and hands back a reference to the value that
resource will produce at deploy time.
"""

from dataclasses import dataclass
from typing import Optional

from stackwire.backend_identifier import to_parameter_full_path
from stackwire.deployment import DeploymentUnit, ResourceNode
from stackwire.domain import BackendIdentifier

__all__ = [
    "SecretValue",
    "SecretPaths",
    "BackendSecret",
    "BackendSecretFetcherFactory",
    "DefaultBackendSecretResolver",
]

SECRET_FETCHER_RESOURCE_TYPE = "Custom::StackwireSecretFetcher"


@dataclass(frozen=True)
class SecretValue:
    """A deploy-time reference to a secret value."""

    reference: str

    def __str__(self) -> str:
        return self.reference


@dataclass(frozen=True)
class SecretPaths:
    branch_secret_path: str
    shared_secret_path: str


class BackendSecretFetcherFactory:
    """Create secret fetcher resources, one per secret name in each unit."""

    def get_or_create(
        self, scope: DeploymentUnit, secret_name: str, backend_id: BackendIdentifier
    ) -> ResourceNode:
        logical_id = f"{secret_name}SecretFetcherResource"
        existing = scope.resources.get(logical_id)
        if existing is not None:
            return existing
        return scope.add_resource(
            logical_id,
            SECRET_FETCHER_RESOURCE_TYPE,
            {
                "namespace": backend_id.namespace,
                "name": backend_id.name,
                "type": backend_id.type,
                "secretName": secret_name,
            },
        )


class BackendSecret:
    """A named secret a resource definition wants injected."""

    def __init__(
        self,
        name: str,
        secret_resource_factory: Optional[BackendSecretFetcherFactory] = None,
    ):
        self.name = name
        self._secret_resource_factory = secret_resource_factory or BackendSecretFetcherFactory()

    def resolve(self, scope: DeploymentUnit, backend_id: BackendIdentifier) -> SecretValue:
        secret_resource = self._secret_resource_factory.get_or_create(
            scope, self.name, backend_id
        )
        return SecretValue(secret_resource.attribute("secretValue"))

    def resolve_path(self, backend_id: BackendIdentifier) -> SecretPaths:
        """Return the parameter paths the secret is looked up under.

        A branch-scoped value takes precedence over the namespace-wide shared one.
        """
        return SecretPaths(
            branch_secret_path=to_parameter_full_path(backend_id, self.name),
            shared_secret_path=to_parameter_full_path(backend_id.namespace, self.name),
        )


class DefaultBackendSecretResolver:
    def __init__(self, scope: DeploymentUnit, backend_id: BackendIdentifier):
        self._scope = scope
        self._backend_id = backend_id

    def resolve_secret(self, backend_secret: BackendSecret) -> SecretValue:
        return backend_secret.resolve(self._scope, self._backend_id)

    def resolve_path(self, backend_secret: BackendSecret) -> SecretPaths:
        return backend_secret.resolve_path(self._backend_id)
