"""
Classification of a named VM into its lifecycle variant.

The variant is derived from scratch for every command: nothing about the VM's
state is cached between invocations.
"""

from pathlib import Path
from typing import IO, Optional

from pcfdev.address import domain_for_ip
from pcfdev.config import Config
from pcfdev.errors import PCFDevError
from pcfdev.interfaces.fs import FileSystem
from pcfdev.interfaces.hypervisor import (
    STATE_ABORTED,
    STATE_PAUSED,
    STATE_RUNNING,
    STATE_SAVED,
    STATE_STOPPED,
    HypervisorDriver,
)
from pcfdev.interfaces.shell import GuestShell
from pcfdev.logging import get_logger
from pcfdev.models import VMConfig
from pcfdev.orchestrator import SSH_RULE, VMOrchestrator
from pcfdev.vm.base import VM
from pcfdev.vm.invalid import Invalid
from pcfdev.vm.not_created import NotCreated
from pcfdev.vm.running import Running
from pcfdev.vm.stopped import Stopped
from pcfdev.vm.suspended import Suspended
from pcfdev.vm.unprovisioned import Unprovisioned

log = get_logger(__name__)

HEALTH_CHECK_COMMAND = "sudo /var/pcfdev/health-check"
HEALTH_CHECK_TIMEOUT = 2 * 60


class Builder:
    """Builds the variant object for a VM name from what the hypervisor reports."""

    def __init__(
        self,
        config: Config,
        driver: HypervisorDriver,
        shell: GuestShell,
        fs: FileSystem,
        orchestrator: VMOrchestrator,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
    ):
        self.config = config
        self.driver = driver
        self.shell = shell
        self.fs = fs
        self.orchestrator = orchestrator
        self.stdout = stdout
        self.stderr = stderr

    def _make(self, cls, vm_config: VMConfig, **kwargs) -> VM:
        return cls(
            vm_config,
            self.orchestrator,
            self.config,
            stdout=self.stdout,
            stderr=self.stderr,
            **kwargs,
        )

    def _invalid(self, vm_name: str, reason: str) -> VM:
        log.warning("vm_invalid", vm_name=vm_name, reason=reason)
        return self._make(Invalid, VMConfig(name=vm_name), reason=reason)

    def vm(self, vm_name: str) -> VM:
        """Return the variant for ``vm_name``.

        Lookups that can fail while the guest is still coming up (IP, domain,
        forwarded port) yield Invalid, except that a missing IP is first looked
        up in the record written at import; driver failures that signal a broken
        hypervisor (memory, state) propagate.
        """
        if not self.driver.vm_exists(vm_name):
            if self.fs.exists(str(Path(self.config.vm_dir) / vm_name)):
                return self._invalid(vm_name, "a directory from a previous VM is left behind")
            return self._make(NotCreated, VMConfig(name=vm_name), builder=self)

        try:
            ip = self.driver.get_vm_ip(vm_name)
        except PCFDevError as e:
            # fall back to what import recorded
            record = self.orchestrator.network_record(vm_name)
            if record is None:
                return self._invalid(vm_name, f"could not determine the VM's IP: {e}")
            log.info("vm_ip_from_record", vm_name=vm_name, ip=record.ip)
            ip = record.ip
        try:
            domain = domain_for_ip(ip)
        except PCFDevError as e:
            return self._invalid(vm_name, str(e))
        memory = self.driver.get_memory(vm_name)
        try:
            ssh_port = self.driver.get_host_forward_port(vm_name, SSH_RULE)
        except PCFDevError as e:
            return self._invalid(vm_name, f"could not determine the SSH port: {e}")

        vm_config = VMConfig(name=vm_name, ip=ip, domain=domain, ssh_port=ssh_port, memory=memory)

        state = self.driver.vm_state(vm_name)
        log.debug("vm_state", vm_name=vm_name, state=state)
        if state == STATE_RUNNING:
            if self.healthy(vm_config):
                return self._make(Running, vm_config)
            return self._make(Unprovisioned, vm_config)
        if state in (STATE_SAVED, STATE_PAUSED):
            return self._make(Suspended, vm_config, state=state)
        if state in (STATE_STOPPED, STATE_ABORTED):
            return self._make(Stopped, vm_config)

        raise PCFDevError(f"failed to handle VM state '{state}'")

    def healthy(self, vm_config: VMConfig) -> bool:
        """True only when the guest health check prints exactly "ok"."""
        try:
            output = self.shell.get_output(
                HEALTH_CHECK_COMMAND,
                self.orchestrator.ssh_addresses(vm_config),
                self.orchestrator.private_key(),
                HEALTH_CHECK_TIMEOUT,
            )
        except (PCFDevError, OSError) as e:
            log.info("health_check_failed", vm_name=vm_config.name, error=str(e))
            return False
        return output.strip() == "ok"
