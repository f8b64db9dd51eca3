"""Tests for the Running variant."""
from pathlib import Path

import pytest

from pcfdev.errors import (
    DestroyVMError,
    HypervisorError,
    OldVMError,
    ProvisionVMError,
    StartOptsError,
    StopVMError,
    SuspendVMError,
)
from pcfdev.models import StartOpts
from pcfdev.vm import Running


@pytest.fixture
def running(vm_config, mock_orchestrator, config):
    return Running(vm_config, mock_orchestrator, config)


class TestRunning:
    def test_start_is_a_no_op(self, running, mock_orchestrator):
        assert running.start(StartOpts()) == "PCF Dev is running"
        mock_orchestrator.start_vm.assert_not_called()

    def test_resume_is_a_no_op(self, running):
        assert running.resume() == "PCF Dev is running"

    def test_status(self, running):
        assert running.status() == "Running"

    def test_stop_shuts_down_gracefully(self, running, mock_orchestrator, vm_config):
        assert running.stop() == "PCF Dev is now stopped"
        mock_orchestrator.stop_vm.assert_called_once_with(vm_config)
        mock_orchestrator.power_off_vm.assert_not_called()

    def test_stop_failure_is_wrapped(self, running, mock_orchestrator):
        mock_orchestrator.stop_vm.side_effect = HypervisorError(["controlvm"], 1)

        with pytest.raises(StopVMError, match="^failed to stop VM: failed to execute 'VBoxManage controlvm'"):
            running.stop()

    def test_suspend(self, running, mock_orchestrator, vm_config):
        assert running.suspend() == "PCF Dev is now suspended"
        mock_orchestrator.suspend_vm.assert_called_once_with(vm_config)

    def test_suspend_failure_is_wrapped(self, running, mock_orchestrator):
        mock_orchestrator.suspend_vm.side_effect = HypervisorError(["controlvm"], 1)

        with pytest.raises(SuspendVMError, match="^failed to suspend VM: "):
            running.suspend()

    @pytest.mark.parametrize("op", ["start", "stop", "suspend", "resume"])
    def test_conflict_is_checked_first(self, running, mock_orchestrator, op):
        mock_orchestrator.conflicting_vm_present.return_value = True
        args = (StartOpts(),) if op == "start" else ()

        with pytest.raises(OldVMError, match="old version of PCF Dev already running"):
            getattr(running, op)(*args)

        mock_orchestrator.stop_vm.assert_not_called()
        mock_orchestrator.suspend_vm.assert_not_called()

    def test_conflict_lookup_failure_is_wrapped(self, running, mock_orchestrator):
        mock_orchestrator.conflicting_vm_present.side_effect = HypervisorError(["list", "vms"], 1)

        with pytest.raises(StopVMError):
            running.stop()

    def test_destroy(self, running, mock_orchestrator, vm_config):
        running.destroy()

        mock_orchestrator.power_off_vm.assert_called_once_with(vm_config)
        mock_orchestrator.destroy_vm.assert_called_once_with(vm_config)
        mock_orchestrator.remove_vm_dir.assert_called_once_with("pcfdev-default")

    def test_destroy_failure_is_wrapped(self, running, mock_orchestrator):
        mock_orchestrator.destroy_vm.side_effect = HypervisorError(["unregistervm"], 1)

        with pytest.raises(DestroyVMError, match="^failed to destroy VM: "):
            running.destroy()

        mock_orchestrator.remove_vm_dir.assert_not_called()

    def test_provision(self, running, mock_orchestrator, vm_config):
        running.provision()
        mock_orchestrator.provision_vm.assert_called_once_with(vm_config, None, None)

    def test_provision_failure_is_wrapped(self, running, mock_orchestrator):
        mock_orchestrator.provision_vm.side_effect = HypervisorError(["x"], 1)

        with pytest.raises(ProvisionVMError, match="^failed to provision VM: "):
            running.provision()


class TestVerifyStartOpts:
    def test_accepts_empty_opts(self, running):
        running.verify_start_opts(StartOpts())

    def test_accepts_services(self, running):
        running.verify_start_opts(StartOpts(services="redis", registries=["r:5000"]))

    def test_rejects_memory(self, running):
        with pytest.raises(StartOptsError, match="memory cannot be changed once the vm has been created"):
            running.verify_start_opts(StartOpts(memory=4000))

    def test_rejects_cpus(self, running):
        with pytest.raises(StartOptsError, match="cores cannot be changed once the vm has been created"):
            running.verify_start_opts(StartOpts(cpus=3))

    def test_rejects_custom_ova_over_default_vm(self, running):
        with pytest.raises(StartOptsError, match="you must destroy your existing VM to use a custom OVA"):
            running.verify_start_opts(StartOpts(ova_path=Path("/tmp/custom.ova")))

    def test_custom_vm_accepts_ova(self, vm_config, mock_orchestrator, config):
        custom = Running(vm_config.model_copy(update={"name": "pcfdev-custom"}), mock_orchestrator, config)
        custom.verify_start_opts(StartOpts(ova_path=Path("/tmp/custom.ova")))
