"""In-memory deployment unit tree.

A :class:`DeploymentUnit` is a named grouping boundary for provisioned
resources. Units form a tree rooted at an application unit; context values
and regions are inherited from ancestors, so a nested unit can be asked for
the deployment identity of the tree it belongs to.

Units only record what would be provisioned: resource nodes, tags, metadata
and a description. Nothing here talks to a cloud provider.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from stackwire.errors import MissingContextError, NamingConflictError

__all__ = ["ResourceNode", "DeploymentUnit", "create_unit"]


@dataclass(frozen=True)
class ResourceNode:
    """A single resource recorded in a deployment unit.

    Attributes:
        logical_id: Name of the resource, unique within its unit.
        resource_type: Provider type string, e.g. ``AWS::SSM::Parameter``.
        properties: Properties the resource would be provisioned with.
    """

    logical_id: str
    resource_type: str
    properties: dict[str, Any] = field(default_factory=dict)

    def attribute(self, attribute_name: str) -> str:
        """Return a reference token to an attribute of this resource."""
        return f"${{{self.logical_id}.{attribute_name}}}"


class DeploymentUnit:
    """A named node in the deployment tree.

    Lookups of context and region fall back to the parent unit when the value
    is not set locally, in the same way a child scope sees its parent's
    components.

    Example:
        >>> app = DeploymentUnit("app", context={"stage": "dev"}, region="eu-west-1")
        >>> auth = create_unit(app, "auth")
        >>> auth.get_context("stage")  # Found in parent
        'dev'
        >>> auth.path
        'app/auth'
    """

    def __init__(
        self,
        name: str,
        parent: Optional["DeploymentUnit"] = None,
        region: Optional[str] = None,
        context: Optional[dict[str, str]] = None,
    ):
        self.name = name
        self.parent = parent
        self.node_context: dict[str, str] = dict(context or {})
        self.children: dict[str, DeploymentUnit] = {}
        self.resources: dict[str, ResourceNode] = {}
        self.tags: dict[str, str] = {}
        self.metadata: dict[str, Any] = {}
        self.outputs: dict[str, Any] = {}
        self.description: Optional[str] = None
        self._region = region

    @property
    def path(self) -> str:
        if self.parent is None:
            return self.name
        return f"{self.parent.path}/{self.name}"

    @property
    def region(self) -> Optional[str]:
        if self._region is not None or self.parent is None:
            return self._region
        return self.parent.region

    def try_get_context(self, key: str) -> Optional[str]:
        if key in self.node_context:
            return self.node_context[key]
        if self.parent is not None:
            return self.parent.try_get_context(key)
        return None

    def get_context(self, key: str) -> str:
        """Look up a context value on this unit or its nearest ancestor.

        Raises:
            MissingContextError: If no unit in the ancestry defines ``key``.
        """
        value = self.try_get_context(key)
        if value is None:
            raise MissingContextError(
                f"No context value for '{key}' found on unit '{self.path}' or its parents"
            )
        return value

    def set_context(self, key: str, value: str):
        self.node_context[key] = value

    def add_resource(
        self,
        logical_id: str,
        resource_type: str,
        properties: Optional[dict[str, Any]] = None,
    ) -> ResourceNode:
        """Record a resource in this unit.

        Raises:
            NamingConflictError: If a resource with ``logical_id`` already exists.
        """
        if logical_id in self.resources:
            raise NamingConflictError(
                f"There is already a resource named '{logical_id}' in unit '{self.path}'"
            )
        resource = ResourceNode(logical_id, resource_type, dict(properties or {}))
        self.resources[logical_id] = resource
        return resource

    def find_resources(self, resource_type: str) -> list[ResourceNode]:
        return [r for r in self.resources.values() if r.resource_type == resource_type]

    def add_tag(self, key: str, value: str):
        self.tags[key] = value

    def __repr__(self) -> str:
        return f"<DeploymentUnit:{self.path}>"


def create_unit(parent: DeploymentUnit, name: str) -> DeploymentUnit:
    """Create a child unit of ``parent`` named ``name``.

    Raises:
        NamingConflictError: If ``parent`` already has a child named ``name``.
    """
    if name in parent.children:
        raise NamingConflictError(
            f"There is already a unit named '{name}' in '{parent.path}'"
        )
    unit = DeploymentUnit(name, parent)
    parent.children[name] = unit
    return unit
