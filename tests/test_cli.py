"""
Tests for the svcdisable command line interface.
"""

import json
from unittest.mock import patch

import pytest

from svcdisable import __version__
from svcdisable.cli.main import app
from svcdisable.services import UnsupportedPlatformError
from svcdisable.shutdown import Orchestrator
from tests.fakes import FakeController, FakeService


@pytest.fixture
def controller():
    return FakeController({
        "SysMain": FakeService(),
        "wuauserv": FakeService(),
        "Spooler": FakeService(),
        "Stuck": FakeService(stop_behavior="hang"),
    })


@pytest.fixture
def patched(controller):
    with patch("svcdisable.cli.main.get_controller", return_value=controller), \
         patch("svcdisable.cli.main.run_preflight", return_value=[]) as preflight:
        yield preflight


class TestDisableCommand:
    """Test the disable command."""

    def test_defaults_are_appended(self, cli_runner, controller, patched):
        result = cli_runner.invoke(app, ['disable', 'Spooler'])

        assert result.exit_code == 0, result.output
        assert sorted(controller.calls_for("disable")) == ["Spooler", "SysMain", "wuauserv"]
        assert "Successfully disabled all services!" in result.output
        patched.assert_called_once()

    def test_no_defaults(self, cli_runner, controller, patched):
        result = cli_runner.invoke(app, ['disable', '--no-defaults', 'Spooler'])

        assert result.exit_code == 0, result.output
        assert controller.calls_for("disable") == ["Spooler"]

    def test_partial_failure_exit_code(self, cli_runner, controller, patched):
        result = cli_runner.invoke(
            app, ['disable', '--no-defaults', '--timeout', '0.1', 'Spooler', 'Stuck']
        )

        assert result.exit_code == 1
        assert "1 services succeeded out of 2." in result.output
        assert "Stuck" not in controller.calls_for("disable")

    def test_json_output(self, cli_runner, controller, patched):
        result = cli_runner.invoke(app, ['disable', '--json'])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data['total_attempted'] == 2
        assert data['total_succeeded'] == 2
        assert sorted(o['service_name'] for o in data['outcomes']) == ["SysMain", "wuauserv"]

    def test_preflight_failure_stops_run(self, cli_runner, controller):
        with patch("svcdisable.cli.main.get_controller", return_value=controller), \
             patch("svcdisable.cli.main.run_preflight", return_value=["Please run the program as administrator."]):
            result = cli_runner.invoke(app, ['disable'])

        assert result.exit_code == 1
        assert "administrator" in result.output
        assert controller.calls == []

    def test_skip_preflight(self, cli_runner, controller):
        with patch("svcdisable.cli.main.get_controller", return_value=controller), \
             patch("svcdisable.cli.main.run_preflight") as preflight:
            result = cli_runner.invoke(app, ['disable', '--skip-preflight'])

        assert result.exit_code == 0, result.output
        preflight.assert_not_called()

    def test_unsupported_platform(self, cli_runner):
        with patch("svcdisable.cli.main.get_controller", side_effect=UnsupportedPlatformError("No service controller available")):
            result = cli_runner.invoke(app, ['disable', '--skip-preflight'])

        assert result.exit_code == 1
        assert "No service controller available" in result.output

    def test_exit_delay(self, cli_runner, controller, patched):
        with patch("svcdisable.cli.main.time.sleep") as sleep:
            result = cli_runner.invoke(app, ['disable', '--exit-delay', '3'])

        assert result.exit_code == 0, result.output
        sleep.assert_called_once_with(3.0)
        assert "Exiting in 3 seconds..." in result.output

    def test_invalid_max_parallel(self, cli_runner, patched):
        result = cli_runner.invoke(app, ['disable', '--max-parallel', '0'])

        assert result.exit_code == 2

    def test_max_parallel_from_environment(self, cli_runner, controller, patched, monkeypatch):
        monkeypatch.setenv("SVCDISABLE_MAX_PARALLEL", "3")
        with patch("svcdisable.cli.main.Orchestrator", wraps=Orchestrator) as orchestrator:
            result = cli_runner.invoke(app, ['disable'])

        assert result.exit_code == 0, result.output
        assert orchestrator.call_args[1]["max_parallel"] == 3


class TestStatusCommand:
    """Test the status command."""

    def test_status(self, cli_runner, controller, patched):
        result = cli_runner.invoke(app, ['status', '--no-defaults', 'Spooler'])

        assert result.exit_code == 0, result.output
        assert "Spooler" in result.output
        assert "running" in result.output
        assert controller.calls_for("stop") == []

    def test_status_json_with_missing_service(self, cli_runner, controller, patched):
        result = cli_runner.invoke(app, ['status', '--no-defaults', '--json', 'Spooler', 'Missing'])

        assert result.exit_code == 1
        rows = json.loads(result.stdout)
        assert rows[0] == {"service_name": "Spooler", "state": "running", "can_stop": True, "error": None}
        assert rows[1]["service_name"] == "Missing"
        assert "does not exist" in rows[1]["error"]


def test_version(cli_runner):
    result = cli_runner.invoke(app, ['--version'])

    assert result.exit_code == 0
    assert __version__ in result.output
