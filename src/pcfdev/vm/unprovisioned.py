from typing import IO, Optional

from pcfdev.errors import (
    PCFDevError,
    ProvisionVMError,
    ResumeVMError,
    StartVMError,
    StopVMError,
    SuspendVMError,
    UnprovisionedError,
)
from pcfdev.logging import get_logger
from pcfdev.models import StartOpts
from pcfdev.vm.base import CreatedVM

log = get_logger(__name__)

GUIDANCE = (
    "PCF Dev is in an invalid state. "
    "Please run 'pcfdev destroy' or 'pcfdev stop' before attempting to start again"
)


class Unprovisioned(CreatedVM):
    """
    Powered on, but the guest never finished provisioning.

    Only stop, destroy and a new provisioning attempt are allowed.
    """

    def start(self, opts: StartOpts) -> str:
        self.ensure_no_conflict(StartVMError)
        raise UnprovisionedError(GUIDANCE)

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
        raise UnprovisionedError(GUIDANCE)

    def resume(self) -> str:
        self.ensure_no_conflict(ResumeVMError)
        raise UnprovisionedError(GUIDANCE)

    def status(self) -> str:
        return f"{GUIDANCE}."

    def verify_start_opts(self, opts: StartOpts) -> None:
        raise UnprovisionedError(GUIDANCE)

    def provision(self, stdout: Optional[IO[str]] = None, stderr: Optional[IO[str]] = None) -> str:
        try:
            self.orchestrator.provision_vm(self.vm_config, stdout or self.stdout, stderr or self.stderr)
        except (PCFDevError, OSError) as e:
            raise ProvisionVMError(e) from e
        return "PCF Dev is now running."
