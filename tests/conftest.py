import pytest

from conformance.agents.orchestrator_agent import OrchestratorAgent
from conformance.agents.reporter_agent import ReporterAgent
from conformance.aggregator import DefectAggregator
from conformance.registry import DeviceRegistry, RoleRegistry

from tests.fakes import FakeAuthenticator, all_credentials, make_factory


@pytest.fixture()
def devices():
    return DeviceRegistry()


@pytest.fixture()
def roles():
    return RoleRegistry()


@pytest.fixture()
def aggregator():
    return DefectAggregator("test-run")


@pytest.fixture()
def reporter(tmp_path):
    return ReporterAgent(reports_dir=tmp_path / "reports", save=True)


@pytest.fixture()
def build_orchestrator(devices, roles, reporter):
    """Build an orchestrator wired to fakes; keyword overrides are passed through."""

    def build(**overrides):
        options = {
            "devices": devices,
            "roles": roles,
            "authenticator": FakeAuthenticator(),
            "driver_factory": make_factory(),
            "credentials": all_credentials(),
            "max_parallel": 4,
            "run_timeout": 30.0,
            "reporter": reporter,
            "capture_artifacts": False,
            "check_access": False,
        }
        options.update(overrides)
        return OrchestratorAgent(**options)

    return build
