"""Domain models used throughout the framework."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Optional, Protocol

from stackwire.deployment import DeploymentUnit

if TYPE_CHECKING:
    from stackwire.backend_secret import DefaultBackendSecretResolver
    from stackwire.output_storage import BackendOutputStorageStrategy
    from stackwire.singleton_construct_container import SingletonConstructContainer
    from stackwire.ssm_environment import BackendIdScopedSsmEnvironmentEntriesGenerator
    from stackwire.stable_identifiers import BackendIdScopedStableBackendIdentifiers
    from stackwire.validations import DefaultResourceNameValidator, ToggleableImportPathVerifier


DeploymentType = Literal["sandbox", "branch", "standalone"]

DEPLOYMENT_TYPES: tuple[str, ...] = ("sandbox", "branch", "standalone")


@dataclass(frozen=True)
class BackendIdentifier:
    """Identifies one deployed backend.

    Attributes:
        namespace: The project (or app id, for branch deployments) the backend belongs to.
        name: The sandbox or branch name.
        type: How the backend is deployed.
    """

    namespace: str
    name: str
    type: DeploymentType


@dataclass(frozen=True)
class BackendOutputEntry:
    """A versioned record written to backend output storage."""

    version: str
    payload: dict[str, Any]


@dataclass(frozen=True)
class GenerateContainerEntryProps:
    """Context handed to a generator the first time the container resolves it.

    Attributes:
        scope: The deployment unit the generator's resources belong in.
        backend_secret_resolver: Resolves secrets against ``scope``.
        ssm_environment_entries_generator: Publishes environment values as parameters.
        stable_backend_identifiers: Identifiers that survive redeployment.
    """

    scope: DeploymentUnit
    backend_secret_resolver: "DefaultBackendSecretResolver"
    ssm_environment_entries_generator: "BackendIdScopedSsmEnvironmentEntriesGenerator"
    stable_backend_identifiers: "BackendIdScopedStableBackendIdentifiers"


@dataclass(frozen=True)
class ConstructFactoryGetInstanceProps:
    """Context handed to every construct factory during the invocation pass."""

    construct_container: "SingletonConstructContainer"
    output_storage_strategy: "BackendOutputStorageStrategy"
    import_path_verifier: "ToggleableImportPathVerifier"
    resource_name_validator: "DefaultResourceNameValidator"


class ConstructContainerEntryGenerator(Protocol):
    """A unit of memoized work for the construct container.

    The generator object itself is the cache key, so it must be the same
    object on every call for memoization to apply.
    """

    resource_group_name: str

    def generate_container_entry(self, props: GenerateContainerEntryProps) -> Any:
        ...


class ConstructFactory(Protocol):
    """A caller-supplied object that produces one resource.

    ``provides`` is an optional capability token other factories can use to
    look this factory up through the construct container.
    """

    provides: Optional[str]

    def get_instance(self, props: ConstructFactoryGetInstanceProps) -> Any:
        ...
