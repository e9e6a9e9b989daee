"""Entry points for resolving construct factories into a backend.

:func:`define_backend` takes a mapping of resource names to construct
factories and resolves it in two passes over the same mapping:

1. Registration: every factory that declares a ``provides`` token is
   registered with the construct container. Nothing is built yet.
2. Invocation: every factory's ``get_instance`` is called in mapping order
   and the results are collected by resource name.

Because all tokens are registered before anything is built, any factory can
look up any other factory while it is being instantiated, and the
container's memoization means shared constructs are only built once however
many factories reference them.
"""

from collections.abc import Iterator, Mapping
from typing import Any, Optional

import structlog

from stackwire.attribution import AttributionMetadataStorage
from stackwire.backend_identifier import get_backend_identifier
from stackwire.branch_linker import BranchLinker
from stackwire.custom_outputs import CustomOutputsAccumulator, ObjectAccumulator
from stackwire.deployment import DeploymentUnit
from stackwire.domain import BackendOutputEntry, ConstructFactory, ConstructFactoryGetInstanceProps
from stackwire.main_stack import create_default_stack
from stackwire.nested_stack_resolver import NestedStackResolver
from stackwire.output_storage import PLATFORM_OUTPUT_KEY, StackMetadataBackendOutputStorageStrategy
from stackwire.singleton_construct_container import SingletonConstructContainer
from stackwire.validations import DefaultResourceNameValidator, ToggleableImportPathVerifier

__all__ = [
    "Backend",
    "BackendFactory",
    "define_backend",
    "collect_tokens",
    "instantiate_all",
]

# Attribution stack type identifying root units. Usage reporting relies on this value.
ROOT_STACK_TYPE = "root"

_PLATFORM_OUTPUT_VERSION = "1"

logger = structlog.get_logger()


def collect_tokens(
    construct_factories: Mapping[str, ConstructFactory],
) -> list[tuple[str, ConstructFactory]]:
    """Return ``(token, factory)`` for every factory that declares a string token."""
    return [
        (factory.provides, factory)
        for factory in construct_factories.values()
        if isinstance(getattr(factory, "provides", None), str)
    ]


def instantiate_all(
    construct_factories: Mapping[str, ConstructFactory],
    props: ConstructFactoryGetInstanceProps,
) -> dict[str, Any]:
    """Call ``get_instance`` on every factory in mapping order.

    Errors raised by a factory propagate immediately; the remaining factories
    are not invoked.
    """
    resources: dict[str, Any] = {}
    for resource_name, construct_factory in construct_factories.items():
        resources[resource_name] = construct_factory.get_instance(props)
        logger.debug("resource_instantiated", resource_name=resource_name)
    return resources


class BackendFactory:
    """Collect and instantiate all the constructs of a backend.

    Attributes:
        resources: The object each construct factory returned, keyed by
            resource name. Used to reference or override the underlying
            constructs from custom code.
    """

    def __init__(
        self,
        construct_factories: Mapping[str, ConstructFactory],
        stack: Optional[DeploymentUnit] = None,
    ):
        """Resolve ``construct_factories`` into ``stack``.

        Args:
            construct_factories: Mapping of resource names to construct factories.
            stack: The root unit of the backend. If None, a default one is
                created from settings.

        Raises:
            TokenConflictError: If two different factories declare the same token.
            StackwireError: For any other configuration problem found while
                resolving. Errors raised by factories propagate unchanged.
        """
        stack = stack if stack is not None else create_default_stack()
        attribution_metadata_storage = AttributionMetadataStorage()
        attribution_metadata_storage.store_attribution_metadata(stack, ROOT_STACK_TYPE)

        self._stack_resolver = NestedStackResolver(stack, attribution_metadata_storage)
        construct_container = SingletonConstructContainer(self._stack_resolver)
        output_storage_strategy = StackMetadataBackendOutputStorageStrategy(stack)
        self._custom_outputs_accumulator = CustomOutputsAccumulator(
            output_storage_strategy, ObjectAccumulator()
        )

        backend_id = get_backend_identifier(stack)
        output_storage_strategy.add_backend_output_entry(
            PLATFORM_OUTPUT_KEY,
            BackendOutputEntry(
                _PLATFORM_OUTPUT_VERSION,
                {"deploymentType": backend_id.type, "region": stack.region},
            ),
        )

        if backend_id.type == "branch":
            BranchLinker(stack, backend_id)

        logger.info(
            "backend_resolution_started",
            namespace=backend_id.namespace,
            name=backend_id.name,
            deployment_type=backend_id.type,
            resource_count=len(construct_factories),
        )

        # register providers but don't build anything yet
        for token, factory in collect_tokens(construct_factories):
            construct_container.register_construct_factory(token, factory)

        self.resources: dict[str, Any] = instantiate_all(
            construct_factories,
            ConstructFactoryGetInstanceProps(
                construct_container=construct_container,
                output_storage_strategy=output_storage_strategy,
                import_path_verifier=ToggleableImportPathVerifier(),
                resource_name_validator=DefaultResourceNameValidator(),
            ),
        )
        logger.info("backend_resolution_completed", resources=list(self.resources))

    def create_stack(self, name: str) -> DeploymentUnit:
        """Return a new unit in the backend for custom resources.

        Raises:
            NamingConflictError: If a unit named ``name`` already exists.
        """
        return self._stack_resolver.create_custom_stack(name)

    def add_output(self, client_config_part: Mapping[str, Any]):
        """Merge a partial client configuration into the backend's outputs."""
        self._custom_outputs_accumulator.add_output(client_config_part)


class Backend:
    """The resolved backend returned by :func:`define_backend`.

    Resources are looked up by name; ``create_stack`` and ``add_output`` act
    on the same resolution session that produced them.

    Example:
        >>> backend = define_backend({"auth": auth, "data": data})
        >>> backend["auth"]
        >>> custom = backend.create_stack("analytics")
        >>> backend.add_output({"custom": {"api_url": url}})
    """

    def __init__(self, factory: BackendFactory):
        self.resources = factory.resources
        self.create_stack = factory.create_stack
        self.add_output = factory.add_output

    def __getitem__(self, resource_name: str) -> Any:
        return self.resources[resource_name]

    def __contains__(self, resource_name: str) -> bool:
        return resource_name in self.resources

    def __iter__(self) -> Iterator[str]:
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)


def define_backend(
    construct_factories: Mapping[str, ConstructFactory],
    stack: Optional[DeploymentUnit] = None,
) -> Backend:
    """Create a backend from construct factories such as those returned by ``define_auth``.

    Args:
        construct_factories: Mapping of resource names to construct factories.
        stack: Optional root unit; a default one is created from settings if omitted.

    Returns:
        The resolved :class:`Backend`.
    """
    return Backend(BackendFactory(construct_factories, stack))
