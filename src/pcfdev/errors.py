"""
Exception hierarchy for PCF Dev.

Lifecycle operations raise these instead of printing; the CLI turns them into
user-facing messages.
"""

from typing import Optional


class PCFDevError(Exception):
    """Base class for every error raised by pcfdev."""


class ConfigError(PCFDevError):
    pass


class OldVMError(PCFDevError):
    """A VM with the owned prefix but an unexpected name blocks the operation."""

    def __init__(self):
        super().__init__(
            "old version of PCF Dev already running, please run `pcfdev destroy` to continue"
        )


class VMOperationError(PCFDevError):
    """Wraps a failure with the name of the lifecycle operation that hit it."""

    operation = "operate on"

    def __init__(self, cause):
        self.cause = cause
        super().__init__(f"failed to {self.operation} VM: {cause}")


class StartVMError(VMOperationError):
    operation = "start"


class StopVMError(VMOperationError):
    operation = "stop"


class SuspendVMError(VMOperationError):
    operation = "suspend"


class ResumeVMError(VMOperationError):
    operation = "resume"


class DestroyVMError(VMOperationError):
    operation = "destroy"


class ProvisionVMError(VMOperationError):
    operation = "provision"


class HypervisorError(PCFDevError):
    """A VBoxManage invocation failed."""

    def __init__(self, args, exit_status: int, output: str = ""):
        self.args_list = list(args)
        self.exit_status = exit_status
        self.output = output
        message = f"failed to execute 'VBoxManage {' '.join(self.args_list)}': exit status {exit_status}"
        if output.strip():
            message = f"{message}\n{output.strip()}"
        super().__init__(message)


class GuestCommandError(PCFDevError):
    """A command run over SSH failed or no guest address answered in time."""

    def __init__(self, message: str, exit_status: Optional[int] = None):
        self.exit_status = exit_status
        super().__init__(message)


class InvalidIPError(PCFDevError):
    def __init__(self, ip: str):
        self.ip = ip
        super().__init__(f"{ip} is not one of the allowed PCF Dev ips")


class NoAvailableNetworkError(PCFDevError):
    def __init__(self):
        super().__init__("all allowed network interfaces are currently taken")


class MultipleVMsError(PCFDevError):
    def __init__(self):
        super().__init__("multiple PCF Dev VMs found")


class CleanupIncompleteError(PCFDevError):
    """Raised when owned VMs or disks survive a destroy sweep."""


class StartOptsError(PCFDevError):
    pass


class IllegalOperationError(PCFDevError):
    """The operation makes no sense in the VM's current state."""


class InvalidStateError(PCFDevError):
    """The VM cannot be classified; carries the lookup that failed."""

    def __init__(self, message: str, reason: Optional[str] = None):
        self.reason = reason
        super().__init__(message)


class UnprovisionedError(PCFDevError):
    pass
