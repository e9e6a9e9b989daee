__all__ = [
    "StackwireError",
    "NamingConflictError",
    "TokenConflictError",
    "MissingContextError",
    "InvalidDeploymentTypeError",
    "OutputVersionMismatchError",
    "InvalidResourceNameError",
    "ImportPathError",
]


class StackwireError(Exception):
    """Base class for configuration errors raised while resolving a backend."""

    pass


class NamingConflictError(StackwireError):
    """Raised when a deployment unit or resource name is already in use."""

    pass


class TokenConflictError(StackwireError):
    """Raised when a capability token is rebound to a different construct factory."""

    pass


class MissingContextError(StackwireError):
    """Raised when a context key is not set on a unit or any of its ancestors."""

    pass


class InvalidDeploymentTypeError(StackwireError):
    pass


class OutputVersionMismatchError(StackwireError):
    """Raised when output fragments with different versions are merged together."""

    pass


class InvalidResourceNameError(StackwireError):
    pass


class ImportPathError(StackwireError):
    """Raised when a resource definition is imported from an unexpected file."""

    pass
