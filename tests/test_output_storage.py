import pytest

from stackwire.domain import BackendOutputEntry
from stackwire.errors import NamingConflictError, OutputVersionMismatchError
from stackwire.output_storage import StackMetadataBackendOutputStorageStrategy


@pytest.fixture
def storage(sandbox_stack) -> StackMetadataBackendOutputStorageStrategy:
    return StackMetadataBackendOutputStorageStrategy(sandbox_stack)


def test_entry_is_stored_as_metadata_and_outputs(storage, sandbox_stack):
    storage.add_backend_output_entry("auth", BackendOutputEntry("1", {"userPoolId": "p1"}))

    assert sandbox_stack.metadata["auth"] == {"version": "1", "stackOutputs": ["userPoolId"]}
    assert sandbox_stack.outputs == {"userPoolId": "p1"}


def test_entry_is_replaced(storage, sandbox_stack):
    storage.add_backend_output_entry("auth", BackendOutputEntry("1", {"userPoolId": "p1"}))
    storage.add_backend_output_entry("auth", BackendOutputEntry("2", {"identityPoolId": "i1"}))

    assert sandbox_stack.metadata["auth"] == {"version": "2", "stackOutputs": ["identityPoolId"]}
    assert sandbox_stack.outputs == {"identityPoolId": "i1"}


def test_append_to_output_list(storage, sandbox_stack):
    storage.append_to_backend_output_list("functions", BackendOutputEntry("1", {"names": "a"}))
    storage.append_to_backend_output_list("functions", BackendOutputEntry("1", {"names": "b"}))
    storage.append_to_backend_output_list("functions", BackendOutputEntry("1", {"arns": "x"}))

    assert sandbox_stack.outputs == {"names": "a,b", "arns": "x"}
    assert sandbox_stack.metadata["functions"]["stackOutputs"] == ["names", "arns"]


def test_append_with_different_version_raises(storage):
    storage.append_to_backend_output_list("functions", BackendOutputEntry("1", {"names": "a"}))

    with pytest.raises(OutputVersionMismatchError):
        storage.append_to_backend_output_list("functions", BackendOutputEntry("2", {"names": "b"}))


def test_replacing_entry_leaves_other_entries_outputs(storage, sandbox_stack):
    storage.add_backend_output_entry("auth", BackendOutputEntry("1", {"userPoolId": "p1"}))
    storage.add_backend_output_entry("data", BackendOutputEntry("1", {"apiUrl": "https://api"}))
    storage.add_backend_output_entry("auth", BackendOutputEntry("1", {"userPoolId": "p2"}))

    assert sandbox_stack.outputs == {"userPoolId": "p2", "apiUrl": "https://api"}
    assert sandbox_stack.metadata["data"]["stackOutputs"] == ["apiUrl"]


def test_output_name_owned_by_another_entry_raises(storage, sandbox_stack):
    storage.add_backend_output_entry("auth", BackendOutputEntry("1", {"userPoolId": "p1"}))

    with pytest.raises(NamingConflictError, match="already an output of entry 'auth'"):
        storage.add_backend_output_entry("data", BackendOutputEntry("1", {"userPoolId": "p2"}))

    assert sandbox_stack.outputs == {"userPoolId": "p1"}
    assert "data" not in sandbox_stack.metadata


def test_append_onto_output_owned_by_another_entry_raises(storage, sandbox_stack):
    storage.add_backend_output_entry("auth", BackendOutputEntry("1", {"userPoolId": "p1"}))
    storage.append_to_backend_output_list("functions", BackendOutputEntry("1", {"names": "a"}))

    with pytest.raises(NamingConflictError):
        storage.append_to_backend_output_list(
            "functions", BackendOutputEntry("1", {"userPoolId": "p2"})
        )

    assert sandbox_stack.outputs == {"userPoolId": "p1", "names": "a"}
    assert sandbox_stack.metadata["functions"]["stackOutputs"] == ["names"]
