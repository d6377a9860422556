import pytest
from click.testing import CliRunner

from tests.fakes import FakeController


# Skip integration tests unless explicitly enabled
def pytest_addoption(parser):
    parser.addoption("--integration", action="store_true", default=False, help="Run integration tests")

def pytest_collection_modifyitems(config, items):
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


@pytest.fixture
def fake_controller():
    return FakeController()


@pytest.fixture
def cli_runner():
    return CliRunner()
