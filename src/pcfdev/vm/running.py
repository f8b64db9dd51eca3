from typing import IO, Optional

from pcfdev.errors import (
    PCFDevError,
    ProvisionVMError,
    ResumeVMError,
    StartVMError,
    StopVMError,
    SuspendVMError,
)
from pcfdev.logging import get_logger
from pcfdev.models import StartOpts
from pcfdev.vm.base import CreatedVM

log = get_logger(__name__)


class Running(CreatedVM):
    """Booted and provisioned; the guest health check answers "ok"."""

    def start(self, opts: StartOpts) -> str:
        self.ensure_no_conflict(StartVMError)
        return "PCF Dev is running"

    def stop(self) -> str:
        self.ensure_no_conflict(StopVMError)
        log.info("stopping_vm", vm_name=self.name)
        try:
            self.orchestrator.stop_vm(self.vm_config)
        except PCFDevError as e:
            raise StopVMError(e) from e
        return "PCF Dev is now stopped"

    def suspend(self) -> str:
        self.ensure_no_conflict(SuspendVMError)
        log.info("suspending_vm", vm_name=self.name)
        try:
            self.orchestrator.suspend_vm(self.vm_config)
        except PCFDevError as e:
            raise SuspendVMError(e) from e
        return "PCF Dev is now suspended"

    def resume(self) -> str:
        self.ensure_no_conflict(ResumeVMError)
        return "PCF Dev is running"

    def status(self) -> str:
        return "Running"

    def provision(self, stdout: Optional[IO[str]] = None, stderr: Optional[IO[str]] = None) -> str:
        try:
            self.orchestrator.provision_vm(self.vm_config, stdout or self.stdout, stderr or self.stderr)
        except (PCFDevError, OSError) as e:
            raise ProvisionVMError(e) from e
        return "PCF Dev is now running."
