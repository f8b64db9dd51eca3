"""
Common shape of the lifecycle variants.

A variant is built by the Builder for one command and thrown away afterwards.
Every operation returns the message the caller should show, or raises.
"""

from abc import ABC, abstractmethod
from typing import IO, Optional, Type

from pcfdev.config import Config
from pcfdev.errors import (
    DestroyVMError,
    OldVMError,
    PCFDevError,
    StartOptsError,
    VMOperationError,
)
from pcfdev.logging import get_logger
from pcfdev.models import StartOpts, VMConfig
from pcfdev.orchestrator import VMOrchestrator

log = get_logger(__name__)

NOT_RUNNING = "PCF Dev VM is not running"


class VM(ABC):
    """One lifecycle state of a PCF Dev VM."""

    def __init__(
        self,
        vm_config: VMConfig,
        orchestrator: VMOrchestrator,
        config: Config,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
    ):
        self.vm_config = vm_config
        self.orchestrator = orchestrator
        self.config = config
        # where guest provisioning output goes
        self.stdout = stdout
        self.stderr = stderr

    @property
    def name(self) -> str:
        return self.vm_config.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    @abstractmethod
    def start(self, opts: StartOpts) -> str:
        pass

    @abstractmethod
    def stop(self) -> str:
        pass

    @abstractmethod
    def suspend(self) -> str:
        pass

    @abstractmethod
    def resume(self) -> str:
        pass

    @abstractmethod
    def status(self) -> str:
        pass

    @abstractmethod
    def destroy(self) -> str:
        pass

    @abstractmethod
    def provision(self, stdout: Optional[IO[str]] = None, stderr: Optional[IO[str]] = None) -> str:
        pass

    @abstractmethod
    def verify_start_opts(self, opts: StartOpts) -> None:
        """Raise if ``opts`` cannot be applied in this state."""
        pass

    def ensure_no_conflict(self, error_cls: Type[VMOperationError]) -> None:
        """Refuse to go on while an old or foreign PCF Dev VM is registered."""
        try:
            conflict = self.orchestrator.conflicting_vm_present(self.name)
        except PCFDevError as e:
            raise error_cls(e) from e
        if conflict:
            raise OldVMError()


class CreatedVM(VM):
    """Behaviour shared by every variant whose VM exists in the hypervisor."""

    def destroy(self) -> str:
        log.info("destroying_vm", vm_name=self.name)
        try:
            self.orchestrator.power_off_vm(self.vm_config)
            self.orchestrator.destroy_vm(self.vm_config)
            self.orchestrator.remove_vm_dir(self.name)
        except (PCFDevError, OSError) as e:
            raise DestroyVMError(e) from e
        return "PCF Dev VM has been destroyed"

    def verify_start_opts(self, opts: StartOpts) -> None:
        if opts.memory:
            raise StartOptsError("memory cannot be changed once the vm has been created")
        if opts.cpus:
            raise StartOptsError("cores cannot be changed once the vm has been created")
        if opts.ova_path and self.name == self.config.default_vm_name:
            raise StartOptsError("you must destroy your existing VM to use a custom OVA")
