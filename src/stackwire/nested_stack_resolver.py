"""Resolution of resource group names to deployment units.

Each resource group (``auth``, ``data``, ``storage`` and so on) is placed in
its own unit nested under the root unit. Units are created the first time a
group asks for one and reused afterwards. Users can also create extra units
for their own resources, as long as the name is not already taken.
"""

import structlog

from stackwire.attribution import AttributionMetadataStorage
from stackwire.deployment import DeploymentUnit, create_unit
from stackwire.errors import NamingConflictError

__all__ = ["ROOT_RESOURCE_GROUP_NAME", "NestedStackResolver"]

ROOT_RESOURCE_GROUP_NAME = "root"
"""Resource group name that resolves to the root unit itself."""

CUSTOM_STACK_TYPE = "custom"

logger = structlog.get_logger()


class NestedStackResolver:
    """Map resource group names to units nested under a root unit.

    Example:
        >>> resolver = NestedStackResolver(root, AttributionMetadataStorage())
        >>> resolver.get_stack_for("auth") is resolver.get_stack_for("auth")
        True
        >>> resolver.get_stack_for("root") is root
        True
    """

    def __init__(
        self,
        root_stack: DeploymentUnit,
        attribution_metadata_storage: AttributionMetadataStorage,
    ):
        self._root_stack = root_stack
        self._attribution_metadata_storage = attribution_metadata_storage
        self._stacks: dict[str, DeploymentUnit] = {}

    def get_stack_for(self, resource_group_name: str) -> DeploymentUnit:
        """Return the unit for ``resource_group_name``, creating it on first use."""
        if resource_group_name == ROOT_RESOURCE_GROUP_NAME:
            return self._root_stack

        if resource_group_name not in self._stacks:
            self._stacks[resource_group_name] = self._create_stack(
                resource_group_name, resource_group_name
            )
        return self._stacks[resource_group_name]

    def create_custom_stack(self, name: str) -> DeploymentUnit:
        """Create a unit for custom resources.

        Raises:
            NamingConflictError: If ``name`` is reserved for the root unit or
                already used by another unit.
        """
        if (
            name == ROOT_RESOURCE_GROUP_NAME
            or name in self._stacks
            or name in self._root_stack.children
        ):
            raise NamingConflictError(f"Custom stack named {name} has already been created")

        stack = self._create_stack(name, CUSTOM_STACK_TYPE)
        self._stacks[name] = stack
        return stack

    def _create_stack(self, name: str, stack_type: str) -> DeploymentUnit:
        stack = create_unit(self._root_stack, name)
        self._attribution_metadata_storage.store_attribution_metadata(stack, stack_type)
        logger.debug("stack_created", name=name, stack_type=stack_type, path=stack.path)
        return stack
