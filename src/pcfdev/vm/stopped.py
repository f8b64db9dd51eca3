from typing import IO, Optional

from pcfdev.errors import (
    IllegalOperationError,
    PCFDevError,
    ProvisionVMError,
    ResumeVMError,
    StartVMError,
    StopVMError,
    SuspendVMError,
)
from pcfdev.logging import get_logger
from pcfdev.models import StartOpts
from pcfdev.vm.base import NOT_RUNNING, CreatedVM

log = get_logger(__name__)


class Stopped(CreatedVM):
    """Created but powered off (or aborted)."""

    def start(self, opts: StartOpts) -> str:
        """Boot the VM, hand it its provision options and provision it."""
        self.ensure_no_conflict(StartVMError)
        log.info("starting_vm", vm_name=self.name)
        try:
            self.orchestrator.start_vm(self.vm_config)
            self.orchestrator.write_provision_options(self.vm_config, opts)
            log.info("provisioning_vm", vm_name=self.name)
            self.orchestrator.provision_vm(self.vm_config, self.stdout, self.stderr)
        except (PCFDevError, OSError) as e:
            raise StartVMError(e) from e
        return "PCF Dev is now running."

    def stop(self) -> str:
        self.ensure_no_conflict(StopVMError)
        return "PCF Dev is stopped"

    def suspend(self) -> str:
        self.ensure_no_conflict(SuspendVMError)
        raise IllegalOperationError("your VM is currently stopped and cannot be suspended")

    def resume(self) -> str:
        self.ensure_no_conflict(ResumeVMError)
        raise IllegalOperationError(
            "your VM is currently stopped. Only a suspended VM can be resumed"
        )

    def status(self) -> str:
        return "Stopped"

    def provision(self, stdout: Optional[IO[str]] = None, stderr: Optional[IO[str]] = None) -> str:
        raise ProvisionVMError(NOT_RUNNING)
