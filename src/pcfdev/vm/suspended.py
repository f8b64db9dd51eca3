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
from pcfdev.interfaces.hypervisor import STATE_PAUSED, STATE_SAVED
from pcfdev.logging import get_logger
from pcfdev.models import StartOpts
from pcfdev.vm.base import NOT_RUNNING, CreatedVM

log = get_logger(__name__)


class Suspended(CreatedVM):
    """Saved to disk or paused in memory; ``state`` records which."""

    def __init__(self, *args, state: str = STATE_SAVED, **kwargs):
        super().__init__(*args, **kwargs)
        self.state = state

    def start(self, opts: StartOpts) -> str:
        self.ensure_no_conflict(StartVMError)
        raise IllegalOperationError(
            "your VM is suspended. Please run 'pcfdev resume' to continue using PCF Dev"
        )

    def stop(self) -> str:
        self.ensure_no_conflict(StopVMError)
        raise IllegalOperationError(
            "your VM is suspended and cannot be stopped. Please run 'pcfdev resume' first"
        )

    def suspend(self) -> str:
        self.ensure_no_conflict(SuspendVMError)
        return "PCF Dev is suspended"

    def resume(self) -> str:
        self.ensure_no_conflict(ResumeVMError)
        log.info("resuming_vm", vm_name=self.name, state=self.state)
        try:
            if self.state == STATE_PAUSED:
                self.orchestrator.resume_paused_vm(self.vm_config)
            else:
                self.orchestrator.resume_saved_vm(self.vm_config)
        except PCFDevError as e:
            raise ResumeVMError(e) from e
        return "PCF Dev is now running"

    def status(self) -> str:
        return "Suspended"

    def provision(self, stdout: Optional[IO[str]] = None, stderr: Optional[IO[str]] = None) -> str:
        raise ProvisionVMError(NOT_RUNNING)
