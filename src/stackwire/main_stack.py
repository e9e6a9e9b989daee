"""Creation of the main deployment unit for a backend."""

from typing import Optional

from stackwire.backend_identifier import (
    BACKEND_NAME_CONTEXT_KEY,
    BACKEND_NAMESPACE_CONTEXT_KEY,
    DEPLOYMENT_TYPE_CONTEXT_KEY,
    to_stack_name,
)
from stackwire.config import Settings, get_settings
from stackwire.deployment import DeploymentUnit, create_unit
from stackwire.domain import BackendIdentifier

__all__ = ["ProjectEnvironmentMainStackCreator", "create_default_stack"]

APP_UNIT_NAME = "app"


class ProjectEnvironmentMainStackCreator:
    """Create the main unit of one backend inside an app unit and tag it."""

    def __init__(self, scope: DeploymentUnit, backend_id: BackendIdentifier):
        self._scope = scope
        self._backend_id = backend_id
        self._main_stack: Optional[DeploymentUnit] = None

    def get_or_create_main_stack(self) -> DeploymentUnit:
        if self._main_stack is None:
            self._main_stack = create_unit(self._scope, to_stack_name(self._backend_id))

        self._main_stack.add_tag("created-by", "stackwire")
        if self._backend_id.type == "branch":
            self._main_stack.add_tag("stackwire:app-id", self._backend_id.namespace)
            self._main_stack.add_tag("stackwire:branch-name", self._backend_id.name)
            self._main_stack.add_tag("stackwire:deployment-type", "branch")
        elif self._backend_id.type == "sandbox":
            self._main_stack.add_tag("stackwire:deployment-type", "sandbox")
        return self._main_stack


def create_default_stack(settings: Optional[Settings] = None) -> DeploymentUnit:
    """Build an app unit from settings and return the backend's main unit in it.

    The backend identity and region are set as context on the app unit, so
    every unit created below the main unit can derive them.
    """
    settings = settings or get_settings()
    app = DeploymentUnit(APP_UNIT_NAME, region=settings.region)
    app.set_context(BACKEND_NAMESPACE_CONTEXT_KEY, settings.backend_namespace)
    app.set_context(BACKEND_NAME_CONTEXT_KEY, settings.backend_name)
    app.set_context(DEPLOYMENT_TYPE_CONTEXT_KEY, settings.deployment_type)
    backend_id = BackendIdentifier(
        settings.backend_namespace, settings.backend_name, settings.deployment_type
    )
    return ProjectEnvironmentMainStackCreator(app, backend_id).get_or_create_main_stack()
