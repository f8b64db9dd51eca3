"""VirtualBox driver implementation on top of the VBoxManage CLI."""

import os
import re
import time
from typing import Dict, List, Optional

from ..address import ip_for_subnet
from ..errors import HypervisorError, PCFDevError
from ..interfaces.hypervisor import (
    STATE_ABORTED,
    STATE_SAVED,
    STATE_STOPPED,
    HypervisorDriver,
)
from ..interfaces.network import NetworkInterface
from ..interfaces.process import ProcessRunner
from ..logging import get_logger

log = get_logger(__name__)

NETMASK = "255.255.255.0"
STORAGE_CONTROLLER = "SATA"

_VM_LINE = re.compile(r'^"(?P<name>.*)" \{(?P<uuid>[0-9a-fA-F-]+)\}$')
_INTERFACE_CREATED = re.compile(r"Interface '(?P<name>[^']+)' was successfully created")

# VBoxManage reports "poweroff"; everything above the driver speaks "stopped".
_STATE_NAMES = {"poweroff": STATE_STOPPED}


def find_vboxmanage() -> str:
    """Locate VBoxManage, honouring VBOX_INSTALL_PATH on hosts that set it."""
    install_path = os.getenv("VBOX_INSTALL_PATH") or os.getenv("VBOX_MSI_INSTALL_PATH")
    if install_path:
        candidate = os.path.join(install_path, "VBoxManage")
        if os.path.exists(candidate):
            return candidate
    return "VBoxManage"


def parse_machine_readable(output: str) -> Dict[str, str]:
    """Parse ``showvminfo --machinereadable`` key=value lines."""
    info: Dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if not sep:
            continue
        info[key.strip().strip('"')] = value.strip().strip('"')
    return info


def parse_host_only_interfaces(output: str) -> List[NetworkInterface]:
    """Parse ``list hostonlyifs`` output (blank-line separated blocks)."""
    interfaces: List[NetworkInterface] = []
    name: Optional[str] = None
    for line in output.splitlines() + [""]:
        key, _, value = line.partition(":")
        key, value = key.strip(), value.strip()
        if key == "Name":
            name = value
        elif key == "IPAddress" and name is not None:
            interfaces.append(NetworkInterface(name=name, ip=value))
            name = None
        elif not line.strip():
            name = None
    return interfaces


class VBoxManageDriver(HypervisorDriver):
    """Drive VirtualBox through VBoxManage subcommands."""

    stop_timeout = 120.0
    poll_interval = 1.0

    def __init__(self, runner: ProcessRunner, vboxmanage: Optional[str] = None):
        self.runner = runner
        self.vboxmanage = vboxmanage or find_vboxmanage()

    def vboxmanage_cmd(self, *args: str) -> str:
        """Run VBoxManage with ``args`` and return its combined output."""
        result = self.runner.run([self.vboxmanage, *args])
        if not result.success:
            raise HypervisorError(args, result.returncode, result.output)
        return result.output

    # ── VM lifecycle ─────────────────────────────────────────────────────────

    def create_vm(self, vm_name: str, base_directory: str) -> None:
        self.vboxmanage_cmd(
            "createvm",
            "--name", vm_name,
            "--ostype", "Ubuntu_64",
            "--basefolder", str(base_directory),
            "--register",
        )

    def start_vm(self, vm_name: str) -> None:
        self.vboxmanage_cmd("startvm", vm_name, "--type", "headless")

    def stop_vm(self, vm_name: str) -> None:
        """Press the ACPI power button and wait for the guest to shut down."""
        self.vboxmanage_cmd("controlvm", vm_name, "acpipowerbutton")
        deadline = time.monotonic() + self.stop_timeout
        while self.vm_state(vm_name) not in (STATE_STOPPED, STATE_ABORTED):
            if time.monotonic() >= deadline:
                raise PCFDevError(f"timed out waiting for VM '{vm_name}' to stop")
            time.sleep(self.poll_interval)

    def power_off_vm(self, vm_name: str) -> None:
        state = self.vm_state(vm_name)
        if state in (STATE_STOPPED, STATE_ABORTED):
            return
        if state == STATE_SAVED:
            self.vboxmanage_cmd("discardstate", vm_name)
            return
        self.vboxmanage_cmd("controlvm", vm_name, "poweroff")

    def suspend_vm(self, vm_name: str) -> None:
        self.vboxmanage_cmd("controlvm", vm_name, "savestate")

    def resume_vm(self, vm_name: str) -> None:
        self.vboxmanage_cmd("controlvm", vm_name, "resume")

    def destroy_vm(self, vm_name: str) -> None:
        self.vboxmanage_cmd("unregistervm", vm_name, "--delete")

    def vm_exists(self, vm_name: str) -> bool:
        return vm_name in self.vms()

    def vm_state(self, vm_name: str) -> str:
        state = self._vm_info(vm_name).get("VMState", "")
        return _STATE_NAMES.get(state, state)

    def vms(self) -> List[str]:
        names = []
        for line in self.vboxmanage_cmd("list", "vms").splitlines():
            match = _VM_LINE.match(line.strip())
            if match:
                names.append(match.group("name"))
        return names

    def _vm_info(self, vm_name: str) -> Dict[str, str]:
        return parse_machine_readable(
            self.vboxmanage_cmd("showvminfo", vm_name, "--machinereadable")
        )

    # ── disks ────────────────────────────────────────────────────────────────

    def disks(self) -> List[str]:
        locations = []
        for line in self.vboxmanage_cmd("list", "hdds").splitlines():
            key, _, value = line.partition(":")
            if key.strip() == "Location":
                locations.append(value.strip())
        return locations

    def attach_disk(self, vm_name: str, disk_path: str) -> None:
        self.vboxmanage_cmd("storagectl", vm_name, "--name", STORAGE_CONTROLLER, "--add", "sata")
        self.vboxmanage_cmd(
            "storageattach", vm_name,
            "--storagectl", STORAGE_CONTROLLER,
            "--medium", str(disk_path),
            "--type", "hdd",
            "--port", "0",
            "--device", "0",
        )

    def clone_disk(self, src: str, dest: str) -> None:
        self.vboxmanage_cmd("clonemedium", "disk", str(src), str(dest))

    def delete_disk(self, disk_path: str) -> None:
        self.vboxmanage_cmd("closemedium", "disk", str(disk_path), "--delete")

    # ── networking ───────────────────────────────────────────────────────────

    def create_host_only_interface(self, ip: str) -> str:
        output = self.vboxmanage_cmd("hostonlyif", "create")
        match = _INTERFACE_CREATED.search(output)
        if not match:
            raise PCFDevError(f"could not determine the name of the created interface: {output.strip()}")
        name = match.group("name")
        self.configure_host_only_interface(name, ip)
        log.info("host_only_interface_created", interface=name, ip=ip)
        return name

    def configure_host_only_interface(self, interface_name: str, ip: str) -> None:
        self.vboxmanage_cmd("hostonlyif", "ipconfig", interface_name, "--ip", ip, "--netmask", NETMASK)

    def attach_network_interface(self, interface_name: str, vm_name: str) -> None:
        self.vboxmanage_cmd(
            "modifyvm", vm_name, "--nic2", "hostonly", "--hostonlyadapter2", interface_name
        )

    def get_host_only_interfaces(self) -> List[NetworkInterface]:
        return parse_host_only_interfaces(self.vboxmanage_cmd("list", "hostonlyifs"))

    def is_interface_in_use(self, interface_name: str) -> bool:
        for vm_name in self.vms():
            info = self._vm_info(vm_name)
            for key, value in info.items():
                if key.startswith("hostonlyadapter") and value == interface_name:
                    return True
        return False

    def forward_port(self, vm_name: str, rule_name: str, host_port: str, guest_port: str) -> None:
        self.vboxmanage_cmd(
            "modifyvm", vm_name, "--natpf1", f"{rule_name},tcp,127.0.0.1,{host_port},,{guest_port}"
        )

    def get_host_forward_port(self, vm_name: str, rule_name: str) -> str:
        """Host port of the NAT rule ``rule_name`` (Forwarding(i)="name,tcp,ip,hport,gip,gport")."""
        for key, value in self._vm_info(vm_name).items():
            if not key.startswith("Forwarding("):
                continue
            fields = value.split(",")
            if len(fields) == 6 and fields[0] == rule_name:
                return fields[3]
        raise PCFDevError("could not find forwarded port")

    def use_dns_proxy(self, vm_name: str) -> None:
        self.vboxmanage_cmd("modifyvm", vm_name, "--natdnshostresolver1", "on")

    def get_vm_ip(self, vm_name: str) -> str:
        interface_name = self._vm_info(vm_name).get("hostonlyadapter2")
        if interface_name and interface_name != "none":
            for iface in self.get_host_only_interfaces():
                if iface.name == interface_name:
                    return ip_for_subnet(iface.ip)
        raise PCFDevError(f"there is no attached hostonlyif for {vm_name}")

    # ── sizing ───────────────────────────────────────────────────────────────

    def set_cpus(self, vm_name: str, cpus: int) -> None:
        self.vboxmanage_cmd("modifyvm", vm_name, "--cpus", str(cpus))

    def set_memory(self, vm_name: str, memory: int) -> None:
        self.vboxmanage_cmd("modifyvm", vm_name, "--memory", str(memory))

    def get_memory(self, vm_name: str) -> int:
        value = self._vm_info(vm_name).get("memory")
        try:
            return int(value)
        except (TypeError, ValueError):
            raise PCFDevError(f"could not read memory of VM '{vm_name}'") from None
