"""The construct container shared by every construct factory of a backend.

The container does two jobs:

- It memoizes construct creation. A generator passed to
  :meth:`SingletonConstructContainer.get_or_compute` is invoked at most once;
  every later call with the same generator object returns the first result.
  Keys are compared by object identity, so two generators that compare equal
  still get separate entries.
- It holds the token registry, mapping capability tokens to the construct
  factories that provide them. This lets a factory find, for example, the
  storage provider without importing it.
"""

from typing import Any, Optional

import structlog

from stackwire.backend_identifier import get_backend_identifier
from stackwire.backend_secret import DefaultBackendSecretResolver
from stackwire.domain import (
    ConstructContainerEntryGenerator,
    ConstructFactory,
    GenerateContainerEntryProps,
)
from stackwire.errors import TokenConflictError
from stackwire.nested_stack_resolver import NestedStackResolver
from stackwire.ssm_environment import BackendIdScopedSsmEnvironmentEntriesGenerator
from stackwire.stable_identifiers import BackendIdScopedStableBackendIdentifiers

__all__ = ["SingletonConstructContainer"]

logger = structlog.get_logger()


class SingletonConstructContainer:
    """Dependency injection container and shared state for building constructs."""

    def __init__(self, stack_resolver: NestedStackResolver):
        self._stack_resolver = stack_resolver
        # id(generator) -> (generator, entry). The generator is kept so its id
        # cannot be reused by another object while the entry is cached.
        self._provider_cache: dict[int, tuple[ConstructContainerEntryGenerator, Any]] = {}
        self._provider_factory_token_map: dict[str, ConstructFactory] = {}

    def get_or_compute(self, generator: ConstructContainerEntryGenerator) -> Any:
        """Return the entry for ``generator``, generating it on first use.

        On first use the generator's unit is resolved from its resource group
        and it is called with a freshly built :class:`GenerateContainerEntryProps`.
        If the generator raises, nothing is cached.
        """
        cached = self._provider_cache.get(id(generator))
        if cached is not None:
            return cached[1]

        scope = self._stack_resolver.get_stack_for(generator.resource_group_name)
        backend_id = get_backend_identifier(scope)
        props = GenerateContainerEntryProps(
            scope=scope,
            backend_secret_resolver=DefaultBackendSecretResolver(scope, backend_id),
            ssm_environment_entries_generator=BackendIdScopedSsmEnvironmentEntriesGenerator(
                scope, backend_id
            ),
            stable_backend_identifiers=BackendIdScopedStableBackendIdentifiers(backend_id),
        )
        entry = generator.generate_container_entry(props)
        self._provider_cache[id(generator)] = (generator, entry)
        logger.debug(
            "construct_cached",
            resource_group=generator.resource_group_name,
            generator=type(generator).__name__,
        )
        return entry

    def get_construct_factory(self, token: str) -> Optional[ConstructFactory]:
        """Get the construct factory registered to ``token``, or None.

        Nothing about the returned factory's type can be checked here: the
        registering and the looking-up code agree on it between themselves.
        By convention tokens are the name of the provided type.
        """
        return self._provider_factory_token_map.get(token)

    def register_construct_factory(self, token: str, provider: ConstructFactory):
        """Register ``provider`` as the factory for ``token``.

        Registering the same factory object twice is allowed.

        Raises:
            TokenConflictError: If ``token`` is registered to a different factory.
        """
        existing = self._provider_factory_token_map.get(token)
        if existing is not None and existing is not provider:
            raise TokenConflictError(
                f"Token {token} is already registered to a construct factory"
            )
        self._provider_factory_token_map[token] = provider
        logger.debug("construct_factory_registered", token=token)
