from typing import IO, Optional

from pcfdev.config import total_host_memory_mb
from pcfdev.errors import (
    PCFDevError,
    ProvisionVMError,
    ResumeVMError,
    StartOptsError,
    StartVMError,
    StopVMError,
    SuspendVMError,
)
from pcfdev.logging import get_logger
from pcfdev.models import StartOpts, VMConfig
from pcfdev.vm.base import NOT_RUNNING, VM

log = get_logger(__name__)


class NotCreated(VM):
    """No VM of this name is registered; ``start`` imports one."""

    def __init__(self, *args, builder=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.builder = builder

    def start(self, opts: StartOpts) -> str:
        """Import the VM, then start it through whatever variant it became."""
        self.ensure_no_conflict(StartVMError)

        if opts.ova_path:
            name, ova_path = self.config.custom_vm_name, opts.ova_path
        else:
            name, ova_path = self.config.default_vm_name, self.config.default_ova_path
        vm_config = VMConfig(
            name=name,
            memory=opts.memory or self.config.default_memory,
            cpus=opts.cpus or self.config.default_cpus,
            ova_path=ova_path,
        )

        log.info("importing_vm", vm_name=name, ova_path=str(ova_path))
        try:
            self.orchestrator.import_vm(vm_config)
            created = self.builder.vm(name)
        except (PCFDevError, OSError) as e:
            raise StartVMError(e) from e
        return created.start(opts)

    def stop(self) -> str:
        self.ensure_no_conflict(StopVMError)
        return "PCF Dev VM has not been created"

    def suspend(self) -> str:
        self.ensure_no_conflict(SuspendVMError)
        return "No VM running, cannot suspend."

    def resume(self) -> str:
        self.ensure_no_conflict(ResumeVMError)
        return "No VM suspended, cannot resume."

    def status(self) -> str:
        return "Not Created"

    def destroy(self) -> str:
        return "PCF Dev VM has not been created"

    def provision(self, stdout: Optional[IO[str]] = None, stderr: Optional[IO[str]] = None) -> str:
        raise ProvisionVMError(NOT_RUNNING)

    def verify_start_opts(self, opts: StartOpts) -> None:
        if opts.memory:
            if opts.memory < self.config.min_memory:
                raise StartOptsError(
                    f"PCF Dev requires at least {self.config.min_memory} MB of memory to run"
                )
            total = total_host_memory_mb()
            if opts.memory > total:
                raise StartOptsError(
                    f"PCF Dev cannot use more memory than the host has ({total} MB)"
                )
        if opts.cpus < 0:
            raise StartOptsError("cannot start PCF Dev with a negative number of cores")
        if opts.ova_path and not opts.ova_path.exists():
            raise StartOptsError(f"custom OVA not found at {opts.ova_path}")
