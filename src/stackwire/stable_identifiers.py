"""Identifiers that stay the same across deployments of one backend."""

from stackwire.backend_identifier import backend_hash
from stackwire.domain import BackendIdentifier

__all__ = ["BackendIdScopedStableBackendIdentifiers"]


class BackendIdScopedStableBackendIdentifiers:
    """Derive stable identifiers from a :class:`BackendIdentifier`.

    Resources that need a globally unique but redeploy-stable name (for
    example a bucket suffix) should use these rather than random values.
    """

    def __init__(self, backend_id: BackendIdentifier):
        self._backend_id = backend_id

    def get_stable_backend_hash(self) -> str:
        return backend_hash(self._backend_id)
