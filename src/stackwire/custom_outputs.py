"""Accumulation of user-supplied client configuration outputs.

Calls to ``backend.add_output`` each supply a partial client configuration.
The fragments are deep-merged into one versioned document, which is written
to backend output storage after every call so that storage always holds the
full merged document.
"""

import copy
import json
from collections.abc import Mapping
from typing import Any, Optional

from stackwire.domain import BackendOutputEntry
from stackwire.errors import OutputVersionMismatchError
from stackwire.output_storage import CUSTOM_OUTPUT_KEY, BackendOutputStorageStrategy

__all__ = [
    "DEFAULT_CLIENT_CONFIG_VERSION",
    "ObjectAccumulator",
    "CustomOutputsAccumulator",
]

DEFAULT_CLIENT_CONFIG_VERSION = "1.1"
"""Client config version applied to fragments that do not declare one."""

_CUSTOM_OUTPUT_ENTRY_VERSION = "1"
_VERSION_KEY = "version"


class ObjectAccumulator:
    """Deep-merge mappings into a single accumulated mapping.

    Nested mappings are merged key by key. Any other value, lists included,
    replaces what was accumulated before under the same key.

    Example:
        >>> accumulator = ObjectAccumulator()
        >>> accumulator.accumulate({"auth": {"user_pool_id": "p1"}})
        >>> accumulator.accumulate({"auth": {"region": "eu-west-1"}})
        >>> accumulator.get_accumulated_object()
        {'auth': {'user_pool_id': 'p1', 'region': 'eu-west-1'}}
    """

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._accumulated: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def accumulate(self, part: Mapping[str, Any]):
        """Merge ``part`` into the accumulated object.

        Raises:
            OutputVersionMismatchError: If ``part`` declares a version different
                from the one already accumulated.
        """
        existing_version = self._accumulated.get(_VERSION_KEY)
        incoming_version = part.get(_VERSION_KEY)
        if (
            existing_version is not None
            and incoming_version is not None
            and existing_version != incoming_version
        ):
            raise OutputVersionMismatchError(
                f"Version mismatch: accumulated outputs have version {existing_version}, "
                f"fragment has version {incoming_version}. "
                "All outputs must use the same version."
            )
        _deep_merge(self._accumulated, part)

    def get_accumulated_object(self) -> dict[str, Any]:
        return copy.deepcopy(self._accumulated)


class CustomOutputsAccumulator:
    """Collect ``add_output`` fragments and persist the merged document."""

    def __init__(
        self,
        output_storage_strategy: BackendOutputStorageStrategy,
        client_config_accumulator: ObjectAccumulator,
    ):
        self._output_storage_strategy = output_storage_strategy
        self._client_config_accumulator = client_config_accumulator

    def add_output(self, client_config_part: Mapping[str, Any]):
        """Merge a client config fragment and persist the result.

        A fragment without a ``version`` gets :data:`DEFAULT_CLIENT_CONFIG_VERSION`.
        The caller's mapping is not modified.
        """
        part = dict(client_config_part)
        if not part.get(_VERSION_KEY):
            part[_VERSION_KEY] = DEFAULT_CLIENT_CONFIG_VERSION

        self._client_config_accumulator.accumulate(part)
        self._output_storage_strategy.add_backend_output_entry(
            CUSTOM_OUTPUT_KEY,
            BackendOutputEntry(
                _CUSTOM_OUTPUT_ENTRY_VERSION,
                {
                    "customOutputs": json.dumps(
                        self._client_config_accumulator.get_accumulated_object()
                    )
                },
            ),
        )


def _deep_merge(target: dict[str, Any], source: Mapping[str, Any]):
    for key, value in source.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            _deep_merge(existing, value)
        elif isinstance(value, Mapping):
            target[key] = _deep_merge({}, value)
        else:
            target[key] = copy.deepcopy(value)
    return target
