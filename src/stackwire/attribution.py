"""Attribution metadata written into deployment unit descriptions."""

import json
import platform
from typing import Optional

from stackwire.backend_identifier import DEPLOYMENT_TYPE_CONTEXT_KEY
from stackwire.deployment import DeploymentUnit

__all__ = ["AttributionMetadataStorage"]

_CREATED_BY = {
    "sandbox": "SandboxDeploy",
    "branch": "PipelineDeploy",
    "standalone": "StandaloneDeploy",
}

_CREATED_ON = {
    "Darwin": "Mac",
    "Windows": "Windows",
    "Linux": "Linux",
}


class AttributionMetadataStorage:
    """Record which tool, platform and deployment flow created a unit."""

    def __init__(self, library_version: Optional[str] = None):
        if library_version is None:
            from stackwire import __version__

            library_version = __version__
        self._library_version = library_version

    def store_attribution_metadata(self, unit: DeploymentUnit, stack_type: str):
        """Write attribution JSON into ``unit.description``.

        Units that already carry a description are left untouched so that
        user-supplied descriptions survive.

        Args:
            unit: The unit to attribute.
            stack_type: What the unit holds, e.g. ``root``, ``custom`` or a
                resource group name such as ``auth``.
        """
        if unit.description:
            return

        deployment_type = unit.try_get_context(DEPLOYMENT_TYPE_CONTEXT_KEY)
        unit.description = json.dumps(
            {
                "createdOn": _CREATED_ON.get(platform.system(), "Other"),
                "createdBy": _CREATED_BY.get(deployment_type, "unknown"),
                "createdWith": self._library_version,
                "stackType": stack_type,
                "metadata": {},
            }
        )
