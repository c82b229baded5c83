import pytest

from cross_test_builder.core.toolchain import ToolchainLocator
from cross_test_builder.tests.helpers import FakeRunner, fake_locator


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def locator() -> ToolchainLocator:
    return fake_locator()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    monkeypatch.delenv("CROSS_TEST_BUILDER_CONFIG", raising=False)
    monkeypatch.delenv("CROSS_TEST_BUILDER_PROJECT_ROOT", raising=False)
