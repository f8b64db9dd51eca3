"""
Pytest fixtures and configuration for pcfdev tests.
"""
import logging
from unittest.mock import MagicMock

import pytest
import structlog

from pcfdev.address import Picker
from pcfdev.config import Config
from pcfdev.interfaces.fs import FileSystem
from pcfdev.interfaces.hypervisor import HypervisorDriver
from pcfdev.interfaces.network import HostNetwork
from pcfdev.interfaces.process import ProcessResult, ProcessRunner
from pcfdev.interfaces.shell import GuestShell
from pcfdev.models import VMConfig
from pcfdev.orchestrator import VMOrchestrator


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Keep the developer's proxy settings and home out of the tests."""
    for name in ("HTTP_PROXY", "HTTPS_PROXY", "NO_PROXY", "http_proxy", "https_proxy", "no_proxy",
                 "PCFDEV_INSECURE_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PCFDEV_HOME", str(tmp_path / "pcfdev-home"))


@pytest.fixture(autouse=True)
def restore_logging():
    """Drop handlers bound to streams that pytest closes after each test."""
    yield
    structlog.reset_defaults()
    logging.basicConfig(handlers=[logging.NullHandler()], force=True)


@pytest.fixture
def config(tmp_path):
    return Config(home=tmp_path / "home")


@pytest.fixture
def driver():
    return MagicMock(spec=HypervisorDriver)


@pytest.fixture
def shell():
    return MagicMock(spec=GuestShell)


@pytest.fixture
def fs():
    return MagicMock(spec=FileSystem)


@pytest.fixture
def picker():
    return MagicMock(spec=Picker)


@pytest.fixture
def host_network():
    network = MagicMock(spec=HostNetwork)
    network.interfaces.return_value = []
    network.ping.return_value = False
    return network


@pytest.fixture
def runner():
    runner = MagicMock(spec=ProcessRunner)
    runner.run.return_value = ProcessResult(returncode=0, stdout="", stderr="")
    runner.stream.return_value = ProcessResult(returncode=0, stdout="", stderr="")
    return runner


@pytest.fixture
def orchestrator(config, driver, shell, fs, picker):
    return VMOrchestrator(config, driver, shell, fs, picker)


@pytest.fixture
def mock_orchestrator():
    orch = MagicMock(spec=VMOrchestrator)
    orch.conflicting_vm_present.return_value = False
    orch.network_record.return_value = None
    return orch


@pytest.fixture
def vm_config():
    return VMConfig(
        name="pcfdev-default",
        ip="192.168.11.11",
        domain="local.pcfdev.io",
        ssh_port="2222",
        memory=4096,
    )
