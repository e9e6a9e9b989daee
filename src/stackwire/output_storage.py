"""Storage of backend outputs on a deployment unit.

Outputs are the values clients need after deployment (endpoints, ids,
generated configuration). Each output entry is recorded in the unit's
metadata with its version and the names of the outputs it contributes; the
values themselves are kept in ``unit.outputs``.
"""

from typing import Any, Optional, Protocol

import structlog

from stackwire.deployment import DeploymentUnit
from stackwire.domain import BackendOutputEntry
from stackwire.errors import NamingConflictError, OutputVersionMismatchError

__all__ = [
    "PLATFORM_OUTPUT_KEY",
    "CUSTOM_OUTPUT_KEY",
    "BackendOutputStorageStrategy",
    "StackMetadataBackendOutputStorageStrategy",
]

PLATFORM_OUTPUT_KEY = "stackwire:platform"
CUSTOM_OUTPUT_KEY = "stackwire:custom"

logger = structlog.get_logger()


class BackendOutputStorageStrategy(Protocol):
    def add_backend_output_entry(self, key: str, entry: BackendOutputEntry) -> None:
        ...

    def append_to_backend_output_list(self, key: str, entry: BackendOutputEntry) -> None:
        ...


class StackMetadataBackendOutputStorageStrategy:
    """Store output entries as metadata and outputs of a single unit."""

    def __init__(self, unit: DeploymentUnit):
        self._unit = unit

    def add_backend_output_entry(self, key: str, entry: BackendOutputEntry) -> None:
        """Store ``entry`` under ``key``, replacing any previous entry for that key.

        Raises:
            NamingConflictError: If a payload name is already an output of
                another key.
        """
        self._check_not_owned_elsewhere(key, entry.payload)

        previous = self._unit.metadata.get(key)
        if previous is not None:
            for output_name in previous["stackOutputs"]:
                self._unit.outputs.pop(output_name, None)

        self._unit.metadata[key] = {
            "version": entry.version,
            "stackOutputs": list(entry.payload.keys()),
        }
        self._unit.outputs.update(entry.payload)
        logger.debug("backend_output_stored", key=key, version=entry.version)

    def append_to_backend_output_list(self, key: str, entry: BackendOutputEntry) -> None:
        """Add ``entry``'s payload values to the list-valued outputs under ``key``.

        Values are stored as comma separated strings.

        Raises:
            OutputVersionMismatchError: If ``key`` already holds an entry of a
                different version.
            NamingConflictError: If a payload name is already an output of
                another key.
        """
        existing = self._unit.metadata.get(key)
        if existing is None:
            self.add_backend_output_entry(key, entry)
            return

        if existing["version"] != entry.version:
            raise OutputVersionMismatchError(
                f"Output entry '{key}' has version {existing['version']}, "
                f"cannot append entry with version {entry.version}"
            )
        self._check_not_owned_elsewhere(key, entry.payload)

        for output_name, value in entry.payload.items():
            if output_name in existing["stackOutputs"]:
                self._unit.outputs[output_name] = f"{self._unit.outputs[output_name]},{value}"
            else:
                self._unit.outputs[output_name] = value
                existing["stackOutputs"].append(output_name)

    def _check_not_owned_elsewhere(self, key: str, payload: dict[str, Any]):
        for output_name in payload:
            owner = self._owner_of(output_name)
            if owner is not None and owner != key:
                raise NamingConflictError(
                    f"Output '{output_name}' of entry '{key}' is already an output of entry '{owner}'"
                )

    def _owner_of(self, output_name: str) -> Optional[str]:
        for key, stored in self._unit.metadata.items():
            if output_name in stored.get("stackOutputs", ()):
                return key
        return None
