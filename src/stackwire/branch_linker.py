"""Linking of branch deployments back to their hosting app branch."""

import structlog

from stackwire.deployment import DeploymentUnit, ResourceNode
from stackwire.domain import BackendIdentifier

__all__ = ["BRANCH_LINKER_RESOURCE_TYPE", "BranchLinker"]

BRANCH_LINKER_RESOURCE_TYPE = "Custom::StackwireBranchLinker"

logger = structlog.get_logger()


class BranchLinker:
    """Record the resource that tells the hosting app which backend a branch uses."""

    def __init__(self, scope: DeploymentUnit, backend_id: BackendIdentifier):
        self.resource: ResourceNode = scope.add_resource(
            "BranchLinkerCustomResource",
            BRANCH_LINKER_RESOURCE_TYPE,
            {"appId": backend_id.namespace, "branchName": backend_id.name},
        )
        logger.info(
            "branch_linker_enabled",
            app_id=backend_id.namespace,
            branch_name=backend_id.name,
        )
