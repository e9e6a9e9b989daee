import json
from dataclasses import dataclass
from typing import Any, Optional

import pytest
from structlog.testing import capture_logs

from stackwire.backend_factory import BackendFactory, collect_tokens, define_backend
from stackwire.branch_linker import BRANCH_LINKER_RESOURCE_TYPE
from stackwire.deployment import ResourceNode
from stackwire.domain import BackendOutputEntry
from stackwire.errors import NamingConflictError, TokenConflictError
from stackwire.output_storage import CUSTOM_OUTPUT_KEY, PLATFORM_OUTPUT_KEY


class TableGenerator:
    resource_group_name = "data"

    def __init__(self):
        self.calls = 0

    def generate_container_entry(self, props) -> ResourceNode:
        self.calls += 1
        return props.scope.add_resource("Table", "AWS::DynamoDB::Table")


class DataFactory:
    provides = "data-provider"

    def __init__(self):
        self.generator = TableGenerator()

    def get_instance(self, props) -> ResourceNode:
        return props.construct_container.get_or_compute(self.generator)


@dataclass
class Auth:
    user_pool: ResourceNode
    data: Optional[ResourceNode]


class UserPoolGenerator:
    resource_group_name = "auth"

    def __init__(self, data: Optional[ResourceNode]):
        self._data = data

    def generate_container_entry(self, props) -> Auth:
        return Auth(props.scope.add_resource("UserPool", "AWS::Cognito::UserPool"), self._data)


class AuthFactory:
    provides = "auth-provider"

    def __init__(self):
        self._generator: Optional[UserPoolGenerator] = None

    def get_instance(self, props) -> Auth:
        if self._generator is None:
            data_factory = props.construct_container.get_construct_factory("data-provider")
            data = data_factory.get_instance(props) if data_factory else None
            self._generator = UserPoolGenerator(data)
        return props.construct_container.get_or_compute(self._generator)


class RecordingFactory:
    def __init__(self, calls: list[str], name: str, provides: Optional[str] = None):
        self._calls = calls
        self._name = name
        self.provides = provides

    def get_instance(self, props) -> Any:
        self._calls.append(self._name)
        return self._name


class FailingFactory:
    provides = None

    def get_instance(self, props):
        raise RuntimeError("cannot build")


class RegionOverridingFactory:
    provides = None

    def get_instance(self, props):
        props.output_storage_strategy.add_backend_output_entry(
            "myResource", BackendOutputEntry("1", {"region": "us-west-2"})
        )


def test_factory_can_reference_factory_instantiated_later(sandbox_stack):
    data = DataFactory()
    backend = define_backend({"auth": AuthFactory(), "data": data}, sandbox_stack)

    assert backend["auth"].data is backend["data"]
    assert data.generator.calls == 1


def test_factory_can_reference_factory_instantiated_earlier(sandbox_stack):
    backend = define_backend({"data": DataFactory(), "auth": AuthFactory()}, sandbox_stack)

    assert backend["auth"].data is backend["data"]


def test_resources_are_placed_in_group_units(sandbox_stack):
    backend = define_backend({"auth": AuthFactory(), "data": DataFactory()}, sandbox_stack)

    assert set(sandbox_stack.children) == {"auth", "data"}
    assert sandbox_stack.children["data"].resources["Table"] is backend["data"]
    assert sandbox_stack.children["auth"].resources["UserPool"] is backend["auth"].user_pool


def test_missing_token_lookup_is_not_an_error(sandbox_stack):
    backend = define_backend({"auth": AuthFactory()}, sandbox_stack)

    assert backend["auth"].data is None


def test_factories_are_invoked_in_mapping_order(sandbox_stack):
    calls = []
    factories = {name: RecordingFactory(calls, name) for name in ["c", "a", "b"]}

    backend = define_backend(factories, sandbox_stack)

    assert calls == ["c", "a", "b"]
    assert list(backend) == ["c", "a", "b"]
    assert len(backend) == 3
    assert "a" in backend


def test_token_conflict_aborts_before_any_factory_is_invoked(sandbox_stack):
    calls = []
    factories = {
        "first": RecordingFactory(calls, "first", provides="storage-provider"),
        "second": RecordingFactory(calls, "second", provides="storage-provider"),
    }

    with pytest.raises(TokenConflictError):
        define_backend(factories, sandbox_stack)

    assert calls == []


def test_same_factory_under_two_names_resolves_to_same_instance(sandbox_stack):
    data = DataFactory()
    backend = define_backend({"data": data, "table": data}, sandbox_stack)

    assert backend["data"] is backend["table"]
    assert data.generator.calls == 1


def test_factory_error_aborts_resolution(sandbox_stack):
    calls = []
    factories = {
        "before": RecordingFactory(calls, "before"),
        "broken": FailingFactory(),
        "after": RecordingFactory(calls, "after"),
    }

    with pytest.raises(RuntimeError, match="cannot build"):
        define_backend(factories, sandbox_stack)

    assert calls == ["before"]


def test_collect_tokens_skips_factories_without_token():
    calls = []
    with_token = RecordingFactory(calls, "a", provides="a-provider")
    without_token = RecordingFactory(calls, "b")

    assert collect_tokens({"a": with_token, "b": without_token}) == [("a-provider", with_token)]


def test_branch_deployment_creates_one_branch_linker(branch_stack):
    define_backend({}, branch_stack)

    linkers = branch_stack.find_resources(BRANCH_LINKER_RESOURCE_TYPE)
    assert len(linkers) == 1
    assert linkers[0].properties == {"appId": "app123", "branchName": "main"}


def test_sandbox_deployment_creates_no_branch_linker(sandbox_stack):
    define_backend({}, sandbox_stack)

    assert sandbox_stack.find_resources(BRANCH_LINKER_RESOURCE_TYPE) == []


def test_platform_output_is_written(sandbox_stack):
    define_backend({}, sandbox_stack)

    assert sandbox_stack.metadata[PLATFORM_OUTPUT_KEY] == {
        "version": "1",
        "stackOutputs": ["deploymentType", "region"],
    }
    assert sandbox_stack.outputs["deploymentType"] == "sandbox"
    assert sandbox_stack.outputs["region"] == "eu-west-1"


def test_factory_cannot_overwrite_platform_outputs(sandbox_stack):
    with pytest.raises(NamingConflictError, match="region"):
        define_backend({"myResource": RegionOverridingFactory()}, sandbox_stack)

    assert sandbox_stack.outputs["region"] == "eu-west-1"
    assert "myResource" not in sandbox_stack.metadata


def test_root_unit_is_attributed_as_root(sandbox_stack):
    define_backend({}, sandbox_stack)

    assert json.loads(sandbox_stack.description)["stackType"] == "root"


def test_create_stack_uses_live_resolver(sandbox_stack):
    backend = define_backend({"data": DataFactory()}, sandbox_stack)

    custom = backend.create_stack("analytics")
    assert custom.parent is sandbox_stack

    with pytest.raises(NamingConflictError):
        backend.create_stack("analytics")
    with pytest.raises(NamingConflictError):
        backend.create_stack("data")


def test_add_output_persists_to_root_unit(sandbox_stack):
    backend = define_backend({}, sandbox_stack)

    backend.add_output({"custom": {"api_url": "https://example.com"}})
    backend.add_output({"custom": {"bucket": "reports"}})

    assert json.loads(sandbox_stack.outputs["customOutputs"]) == {
        "version": "1.1",
        "custom": {"api_url": "https://example.com", "bucket": "reports"},
    }
    assert CUSTOM_OUTPUT_KEY in sandbox_stack.metadata


def test_backend_factory_exposes_resources(sandbox_stack):
    factory = BackendFactory({"data": DataFactory()}, sandbox_stack)

    assert factory.resources["data"].logical_id == "Table"


def test_default_stack_is_built_from_environment(monkeypatch):
    monkeypatch.setenv("STACKWIRE_BACKEND_NAMESPACE", "billing")
    monkeypatch.setenv("STACKWIRE_BACKEND_NAME", "staging")
    monkeypatch.setenv("STACKWIRE_DEPLOYMENT_TYPE", "standalone")

    class RootScopeGenerator:
        resource_group_name = "root"

        def generate_container_entry(self, props):
            return props.scope

    class RootScopeFactory:
        provides = None

        def __init__(self):
            self._generator = RootScopeGenerator()

        def get_instance(self, props):
            return props.construct_container.get_or_compute(self._generator)

    backend = define_backend({"root": RootScopeFactory()})

    root = backend["root"]
    assert root.name.startswith("stackwire-billing-staging-standalone-")
    assert root.outputs["deploymentType"] == "standalone"


def test_resolution_is_logged(sandbox_stack):
    with capture_logs() as logs:
        define_backend({"data": DataFactory()}, sandbox_stack)

    events = [log["event"] for log in logs]
    assert "backend_resolution_started" in events
    assert "backend_resolution_completed" in events
