"""Publishing of resource environment values as backend-scoped parameters."""

from dataclasses import dataclass

import structlog

from stackwire.backend_identifier import to_resource_reference_path
from stackwire.deployment import DeploymentUnit
from stackwire.domain import BackendIdentifier

__all__ = ["SsmEnvironmentEntry", "BackendIdScopedSsmEnvironmentEntriesGenerator"]

SSM_PARAMETER_RESOURCE_TYPE = "AWS::SSM::Parameter"

logger = structlog.get_logger()


@dataclass(frozen=True)
class SsmEnvironmentEntry:
    """An environment variable name and the parameter path holding its value."""

    name: str
    path: str


class BackendIdScopedSsmEnvironmentEntriesGenerator:
    """Store environment values as parameters scoped to one backend.

    Functions receive the parameter paths rather than the values, so values
    produced by other units can be read at runtime without a hard reference
    between units.
    """

    def __init__(self, scope: DeploymentUnit, backend_id: BackendIdentifier):
        self._scope = scope
        self._backend_id = backend_id

    def generate_ssm_environment_entries(
        self, scope_context: dict[str, str]
    ) -> list[SsmEnvironmentEntry]:
        """Create one parameter per entry of ``scope_context``.

        Args:
            scope_context: Mapping of environment variable names to values.

        Returns:
            One entry per input item, in input order.

        Raises:
            NamingConflictError: If a parameter for the same name was already
                generated in this unit.
        """
        entries = []
        for env_name, value in scope_context.items():
            path = to_resource_reference_path(self._backend_id, env_name)
            self._scope.add_resource(
                f"{env_name}Parameter",
                SSM_PARAMETER_RESOURCE_TYPE,
                {"parameterName": path, "stringValue": value},
            )
            entries.append(SsmEnvironmentEntry(env_name, path))

        logger.debug(
            "ssm_environment_entries_generated",
            unit=self._scope.path,
            names=[entry.name for entry in entries],
        )
        return entries
