"""Validation helpers handed to construct factories."""

import re
import traceback
from typing import Optional

from stackwire.config import get_settings
from stackwire.errors import ImportPathError, InvalidResourceNameError

__all__ = [
    "capture_import_stack",
    "ToggleableImportPathVerifier",
    "DefaultResourceNameValidator",
]


def capture_import_stack() -> list[str]:
    """Return the file names of the calling frames, innermost first.

    Call this from a ``define_*`` function: the first entry is the file
    defining that function and the second is the file that called it.
    """
    return [frame.filename for frame in reversed(traceback.extract_stack()[:-1])]


class ToggleableImportPathVerifier:
    """Check that a resource was defined in the file convention expects.

    Verification can be switched off with the
    ``STACKWIRE_DISABLE_IMPORT_PATH_VERIFICATION`` setting.
    """

    def __init__(self, do_verify: Optional[bool] = None):
        if do_verify is None:
            do_verify = not get_settings().disable_import_path_verification
        self._do_verify = do_verify

    def verify(
        self,
        import_stack: Optional[list[str]],
        expected_import_suffix: str,
        error_message: str,
    ):
        """Raise if the resource was not defined in a file ending with ``expected_import_suffix``.

        Args:
            import_stack: Result of :func:`capture_import_stack` taken when the
                resource was defined.
            expected_import_suffix: Path suffix, without extension, of the file
                expected to define the resource, e.g. ``"auth/resource"``.
            error_message: Message of the raised error.

        Raises:
            ImportPathError: If the defining file does not match.
        """
        if not self._do_verify or not import_stack or len(import_stack) < 2:
            return

        importing_file = import_stack[1]
        pattern = rf"{re.escape(expected_import_suffix)}(\.py)?$"
        if not re.search(pattern, importing_file):
            raise ImportPathError(error_message)


class DefaultResourceNameValidator:
    _RESOURCE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")

    def validate(self, resource_name: str):
        """Raises :class:`InvalidResourceNameError` unless the name is alphanumeric, ``_`` or ``-``."""
        if not self._RESOURCE_NAME_PATTERN.match(resource_name):
            raise InvalidResourceNameError(
                f"Resource name contains invalid characters, found {resource_name}. "
                "Change the resource name to only use alphanumeric characters, "
                "underscores and hyphens."
            )
