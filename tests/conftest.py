import pytest
import structlog

from stackwire.config import Settings, reset_settings
from stackwire.deployment import DeploymentUnit
from stackwire.main_stack import create_default_stack


@pytest.fixture(autouse=True)
def clean_global_state():
    reset_settings()
    yield
    reset_settings()
    structlog.reset_defaults()


@pytest.fixture
def sandbox_settings() -> Settings:
    return Settings(
        backend_namespace="shop",
        backend_name="alice",
        deployment_type="sandbox",
        region="eu-west-1",
    )


@pytest.fixture
def branch_settings() -> Settings:
    return Settings(
        backend_namespace="app123",
        backend_name="main",
        deployment_type="branch",
        region="us-east-1",
    )


@pytest.fixture
def sandbox_stack(sandbox_settings) -> DeploymentUnit:
    return create_default_stack(sandbox_settings)


@pytest.fixture
def branch_stack(branch_settings) -> DeploymentUnit:
    return create_default_stack(branch_settings)
