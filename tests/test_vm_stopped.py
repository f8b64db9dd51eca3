"""Tests for the Stopped variant."""
from unittest.mock import MagicMock, call

import pytest

from pcfdev.errors import (
    GuestCommandError,
    IllegalOperationError,
    OldVMError,
    ProvisionVMError,
    StartOptsError,
    StartVMError,
)
from pcfdev.models import StartOpts
from pcfdev.vm import Stopped


@pytest.fixture
def stopped(vm_config, mock_orchestrator, config):
    return Stopped(vm_config, mock_orchestrator, config)


class TestStopped:
    def test_start_boots_then_provisions(self, stopped, mock_orchestrator, vm_config):
        opts = StartOpts(services="redis", registries=["r:5000"])

        assert stopped.start(opts) == "PCF Dev is now running."

        assert mock_orchestrator.method_calls == [
            call.conflicting_vm_present("pcfdev-default"),
            call.start_vm(vm_config),
            call.write_provision_options(vm_config, opts),
            call.provision_vm(vm_config, None, None),
        ]

    def test_start_passes_output_streams_to_provisioning(self, vm_config, mock_orchestrator, config):
        out, err = MagicMock(), MagicMock()
        stopped = Stopped(vm_config, mock_orchestrator, config, stdout=out, stderr=err)

        stopped.start(StartOpts())

        mock_orchestrator.provision_vm.assert_called_once_with(vm_config, out, err)

    def test_start_failure_is_wrapped(self, stopped, mock_orchestrator):
        mock_orchestrator.start_vm.side_effect = GuestCommandError("ssh: timed out")

        with pytest.raises(StartVMError, match="^failed to start VM: ssh: timed out$"):
            stopped.start(StartOpts())

        mock_orchestrator.provision_vm.assert_not_called()

    def test_start_with_conflict(self, stopped, mock_orchestrator):
        mock_orchestrator.conflicting_vm_present.return_value = True

        with pytest.raises(OldVMError):
            stopped.start(StartOpts())

        mock_orchestrator.start_vm.assert_not_called()

    def test_stop_is_a_no_op(self, stopped, mock_orchestrator):
        assert stopped.stop() == "PCF Dev is stopped"
        mock_orchestrator.stop_vm.assert_not_called()

    def test_suspend_fails(self, stopped):
        with pytest.raises(IllegalOperationError, match="stopped and cannot be suspended"):
            stopped.suspend()

    def test_resume_fails(self, stopped):
        with pytest.raises(IllegalOperationError, match="Only a suspended VM can be resumed"):
            stopped.resume()

    def test_status(self, stopped):
        assert stopped.status() == "Stopped"

    def test_destroy(self, stopped, mock_orchestrator, vm_config):
        stopped.destroy()
        mock_orchestrator.power_off_vm.assert_called_once_with(vm_config)
        mock_orchestrator.destroy_vm.assert_called_once_with(vm_config)

    def test_provision_fails(self, stopped):
        with pytest.raises(ProvisionVMError, match="failed to provision VM: PCF Dev VM is not running"):
            stopped.provision()

    def test_verify_rejects_memory(self, stopped):
        with pytest.raises(StartOptsError, match="memory cannot be changed"):
            stopped.verify_start_opts(StartOpts(memory=3500))
