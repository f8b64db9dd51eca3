"""
VM orchestration for PCF Dev.

Turns a VMConfig into the sequence of hypervisor and guest calls that import,
boot, provision and clean up the VM. Every step is a single external call and
the first failure aborts the sequence; nothing that already ran is rolled back.
"""

import json
import os
import shlex
from pathlib import Path
from typing import IO, List, Optional

from pydantic import ValidationError

from pcfdev import templates
from pcfdev.address import Picker, domain_for_ip, ip_for_subnet
from pcfdev.config import Config
from pcfdev.errors import CleanupIncompleteError, MultipleVMsError, PCFDevError
from pcfdev.interfaces.fs import FileSystem
from pcfdev.interfaces.hypervisor import HypervisorDriver
from pcfdev.interfaces.shell import GuestShell, SSHAddress
from pcfdev.logging import get_logger, log_operation
from pcfdev.models import NetworkConfig, ProvisionOptions, StartOpts, VMConfig

log = get_logger(__name__)

SSH_RULE = "ssh"
GUEST_SSH_PORT = "22"
AUTHORIZED_KEYS = "/home/vcap/.ssh/authorized_keys"
PROVISION_OPTIONS_PATH = "/var/pcfdev/provision-options.json"
PROVISION_SCRIPT = "/var/pcfdev/run"
VM_CONFIG_FILE = "vm_config.json"

BOOT_TIMEOUT = 5 * 60
PROBE_TIMEOUT = 30
PROVISION_TIMEOUT = 5 * 60


class VMOrchestrator:
    """
    Sequences driver and guest-shell calls for one PCF Dev installation.

    Usage:
        orch = VMOrchestrator(config, driver, shell, fs, picker)
        orch.import_vm(vm_config)
        orch.start_vm(vm_config)
    """

    def __init__(
        self,
        config: Config,
        driver: HypervisorDriver,
        shell: GuestShell,
        fs: FileSystem,
        picker: Picker,
    ):
        self.config = config
        self.driver = driver
        self.shell = shell
        self.fs = fs
        self.picker = picker

    # ── paths ────────────────────────────────────────────────────────────────

    def vm_path(self, vm_name: str) -> Path:
        return Path(self.config.vm_dir) / vm_name

    def vm_config_path(self, vm_name: str) -> Path:
        return self.vm_path(vm_name) / VM_CONFIG_FILE

    @staticmethod
    def ssh_addresses(vm_config: VMConfig) -> List[SSHAddress]:
        """Forwarded loopback port first, then the guest's own address."""
        return [
            SSHAddress(ip="127.0.0.1", port=vm_config.ssh_port),
            SSHAddress(ip=vm_config.ip, port=GUEST_SSH_PORT),
        ]

    @staticmethod
    def loopback_address(vm_config: VMConfig) -> List[SSHAddress]:
        return [SSHAddress(ip="127.0.0.1", port=vm_config.ssh_port)]

    def private_key(self) -> bytes:
        return self.fs.read(str(self.config.private_key_path))

    # ── import ───────────────────────────────────────────────────────────────

    def import_vm(self, vm_config: VMConfig) -> None:
        """Create and configure a new VM from ``vm_config.ova_path``."""
        name = vm_config.name
        vm_dir = Path(self.config.vm_dir)
        compressed_disk = vm_dir / f"{name}-disk1.vmdk.compressed"
        disk = vm_dir / name / f"{name}-disk1.vmdk"

        with log_operation(log, "import_vm", vm_name=name) as oplog:
            self.driver.create_vm(name, str(vm_dir))
            self.fs.extract(str(vm_config.ova_path), str(compressed_disk), r"\w+\.vmdk")
            self.driver.clone_disk(str(compressed_disk), str(disk))
            self.driver.delete_disk(str(compressed_disk))
            self.driver.attach_disk(name, str(disk))
            oplog.debug("disk_attached", disk=str(disk))

            interfaces = self.driver.get_host_only_interfaces()
            gateway = self.picker.select_available_ip(interfaces)
            interface_name = self._claim_interface(interfaces, gateway)
            self.driver.attach_network_interface(interface_name, name)

            ip = ip_for_subnet(gateway)
            record = NetworkConfig(ip=ip, domain=domain_for_ip(ip))
            self.fs.write(str(self.vm_config_path(name)), record.to_json().encode())
            oplog.debug("network_attached", interface=interface_name, ip=ip)

            self.driver.use_dns_proxy(name)
            _, ssh_port = self.shell.generate_address()
            self.driver.forward_port(name, SSH_RULE, ssh_port, GUEST_SSH_PORT)

            self.driver.set_cpus(name, vm_config.cpus)
            self.driver.set_memory(name, vm_config.memory)

    def _claim_interface(self, interfaces, gateway: str) -> str:
        """Reuse the interface that already carries ``gateway``, else create one."""
        for iface in interfaces:
            if iface.ip == gateway:
                self.driver.configure_host_only_interface(iface.name, gateway)
                return iface.name
        return self.driver.create_host_only_interface(gateway)

    # ── boot ─────────────────────────────────────────────────────────────────

    def start_vm(self, vm_config: VMConfig) -> None:
        """Boot the VM and write its key, network and proxy configuration."""
        with log_operation(log, "start_vm", vm_name=vm_config.name) as oplog:
            self.driver.start_vm(vm_config.name)
            self._insert_secure_keypair(vm_config)

            private_key = self.private_key()
            self.shell.run_command(
                templates.tee_command(templates.network_interfaces(vm_config.ip), "/etc/network/interfaces"),
                self.ssh_addresses(vm_config),
                private_key,
                BOOT_TIMEOUT,
            )
            oplog.debug("network_configured")

            settings = templates.proxy_settings(
                vm_config.ip,
                vm_config.domain,
                http_proxy=self.config.http_proxy,
                https_proxy=self.config.https_proxy,
                no_proxy=self.config.no_proxy,
            )
            self.shell.run_command(
                templates.tee_command(templates.environment(settings), "/etc/environment"),
                self.ssh_addresses(vm_config),
                private_key,
                BOOT_TIMEOUT,
            )
            oplog.debug("environment_configured")

            # the guest only picks up the new files after a reboot
            self.driver.stop_vm(vm_config.name)
            self.driver.start_vm(vm_config.name)

    def _insert_secure_keypair(self, vm_config: VMConfig) -> None:
        key_path = str(self.config.private_key_path)
        if self.fs.exists(key_path):
            return

        private_key, public_key = self.shell.generate_keypair()
        self.shell.run_command(
            f'echo -n "{public_key.decode()}" > {AUTHORIZED_KEYS}',
            self.ssh_addresses(vm_config),
            self.config.insecure_private_key(),
            BOOT_TIMEOUT,
        )
        self.fs.write(key_path, private_key)
        self.fs.chmod(key_path, 0o600)
        log.info("private_key_written", path=key_path)

    # ── provisioning ─────────────────────────────────────────────────────────

    def write_provision_options(self, vm_config: VMConfig, opts: StartOpts) -> None:
        options = ProvisionOptions(
            domain=vm_config.domain,
            ip=vm_config.ip,
            services=opts.services,
            registries=opts.registries,
        )
        self.shell.run_command(
            f"echo {shlex.quote(options.to_json())} | sudo tee {PROVISION_OPTIONS_PATH} > /dev/null",
            self.loopback_address(vm_config),
            self.private_key(),
            PROBE_TIMEOUT,
        )

    def provision_vm(
        self,
        vm_config: VMConfig,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
    ) -> None:
        """Run the guest provisioner with the options stored in the guest."""
        addresses = self.loopback_address(vm_config)
        with log_operation(log, "provision", vm_name=vm_config.name):
            private_key = self.private_key()
            try:
                self.shell.run_command(
                    f"if [ -e {PROVISION_OPTIONS_PATH} ]; then exit 0; else exit 1; fi",
                    addresses,
                    private_key,
                    PROBE_TIMEOUT,
                    stdout,
                    stderr,
                )
            except PCFDevError as e:
                raise PCFDevError("missing provision configuration") from e

            output = self.shell.get_output(
                f"cat {PROVISION_OPTIONS_PATH}", addresses, private_key, PROBE_TIMEOUT
            )
            try:
                options = ProvisionOptions.model_validate(json.loads(output))
            except (json.JSONDecodeError, ValidationError) as e:
                raise PCFDevError(f"invalid provision configuration: {e}") from e

            self.shell.run_command(
                f'sudo -H {PROVISION_SCRIPT} "{options.domain}" "{options.ip}" '
                f'"{options.services}" "{",".join(options.registries)}"',
                addresses,
                private_key,
                PROVISION_TIMEOUT,
                stdout,
                stderr,
            )

    # ── pass-throughs ────────────────────────────────────────────────────────

    def stop_vm(self, vm_config: VMConfig) -> None:
        self.driver.stop_vm(vm_config.name)

    def suspend_vm(self, vm_config: VMConfig) -> None:
        self.driver.suspend_vm(vm_config.name)

    def resume_saved_vm(self, vm_config: VMConfig) -> None:
        self.driver.start_vm(vm_config.name)

    def resume_paused_vm(self, vm_config: VMConfig) -> None:
        self.driver.resume_vm(vm_config.name)

    def power_off_vm(self, vm_config: VMConfig) -> None:
        self.driver.power_off_vm(vm_config.name)

    def destroy_vm(self, vm_config: VMConfig) -> None:
        self.driver.destroy_vm(vm_config.name)

    def remove_vm_dir(self, vm_name: str) -> None:
        self.fs.remove(str(self.vm_path(vm_name)))

    # ── owned VMs ────────────────────────────────────────────────────────────

    def get_vm_name(self) -> str:
        """Name of the one VM we own, "" if there is none."""
        name = ""
        for vm in self.driver.vms():
            if self.config.is_owned(vm):
                if name:
                    raise MultipleVMsError()
                name = vm
        return name

    def conflicting_vm_present(self, vm_name: str) -> bool:
        """True when an owned VM other than ``vm_name``, or with an unknown name, exists."""
        known = {self.config.default_vm_name, self.config.custom_vm_name}
        for vm in self.driver.vms():
            if self.config.is_owned(vm) and (vm != vm_name or vm not in known):
                return True
        return False

    def destroy_owned_vms(self) -> None:
        """Best-effort removal of every owned VM and disk.

        Individual failures are only logged; what matters is that nothing we
        own is left once the sweep is over.
        """
        with log_operation(log, "destroy_owned_vms") as oplog:
            for vm in self.driver.vms():
                if not self.config.is_owned(vm):
                    continue
                steps = (("power_off_vm", self.driver.power_off_vm), ("destroy_vm", self.driver.destroy_vm))
                for step_name, step in steps:
                    try:
                        step(vm)
                    except PCFDevError as e:
                        oplog.warning("sweep_step_failed", vm_name=vm, step=step_name, error=str(e))

            if any(self.config.is_owned(vm) for vm in self.driver.vms()):
                raise CleanupIncompleteError("failed to destroy all pcfdev vms")

            for disk in self.driver.disks():
                if not self.config.is_owned(os.path.basename(disk)):
                    continue
                try:
                    self.driver.delete_disk(disk)
                except PCFDevError as e:
                    oplog.warning("sweep_step_failed", disk=disk, step="delete_disk", error=str(e))

            if any(self.config.is_owned(os.path.basename(d)) for d in self.driver.disks()):
                raise CleanupIncompleteError("failed to destroy all pcfdev disks")

    # ── records ──────────────────────────────────────────────────────────────

    def network_record(self, vm_name: str) -> Optional[NetworkConfig]:
        """The network record written at import, None when missing or unreadable."""
        path = str(self.vm_config_path(vm_name))
        if not self.fs.exists(path):
            return None
        try:
            return NetworkConfig.from_json(self.fs.read(path))
        except (OSError, ValidationError) as e:
            log.warning("network_record_unreadable", vm_name=vm_name, path=path, error=str(e))
            return None
