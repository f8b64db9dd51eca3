"""Interfaces for PCF Dev hypervisor drivers."""

from abc import ABC, abstractmethod
from typing import List

from pcfdev.interfaces.network import NetworkInterface

STATE_RUNNING = "running"
STATE_STOPPED = "stopped"
STATE_ABORTED = "aborted"
STATE_SAVED = "saved"
STATE_PAUSED = "paused"


class HypervisorDriver(ABC):
    """Abstract interface for the VM, disk and network primitives of a hypervisor."""

    # ── VM lifecycle ─────────────────────────────────────────────────────────

    @abstractmethod
    def create_vm(self, vm_name: str, base_directory: str) -> None:
        """Register an empty VM under base_directory."""
        pass

    @abstractmethod
    def start_vm(self, vm_name: str) -> None:
        pass

    @abstractmethod
    def stop_vm(self, vm_name: str) -> None:
        """Gracefully shut the VM down and wait until it is off."""
        pass

    @abstractmethod
    def power_off_vm(self, vm_name: str) -> None:
        """Hard power-off."""
        pass

    @abstractmethod
    def suspend_vm(self, vm_name: str) -> None:
        pass

    @abstractmethod
    def resume_vm(self, vm_name: str) -> None:
        """Resume a paused VM."""
        pass

    @abstractmethod
    def destroy_vm(self, vm_name: str) -> None:
        """Unregister the VM and delete its files."""
        pass

    @abstractmethod
    def vm_exists(self, vm_name: str) -> bool:
        pass

    @abstractmethod
    def vm_state(self, vm_name: str) -> str:
        """One of running, stopped, aborted, saved, paused (or whatever else the hypervisor says)."""
        pass

    @abstractmethod
    def vms(self) -> List[str]:
        """Names of all registered VMs."""
        pass

    # ── disks ────────────────────────────────────────────────────────────────

    @abstractmethod
    def disks(self) -> List[str]:
        """Paths of all registered disks."""
        pass

    @abstractmethod
    def attach_disk(self, vm_name: str, disk_path: str) -> None:
        pass

    @abstractmethod
    def clone_disk(self, src: str, dest: str) -> None:
        pass

    @abstractmethod
    def delete_disk(self, disk_path: str) -> None:
        pass

    # ── networking ───────────────────────────────────────────────────────────

    @abstractmethod
    def create_host_only_interface(self, ip: str) -> str:
        """Create a host-only interface with the given IP. Returns its name."""
        pass

    @abstractmethod
    def configure_host_only_interface(self, interface_name: str, ip: str) -> None:
        pass

    @abstractmethod
    def attach_network_interface(self, interface_name: str, vm_name: str) -> None:
        pass

    @abstractmethod
    def get_host_only_interfaces(self) -> List[NetworkInterface]:
        pass

    @abstractmethod
    def is_interface_in_use(self, interface_name: str) -> bool:
        pass

    @abstractmethod
    def forward_port(self, vm_name: str, rule_name: str, host_port: str, guest_port: str) -> None:
        pass

    @abstractmethod
    def get_host_forward_port(self, vm_name: str, rule_name: str) -> str:
        pass

    @abstractmethod
    def use_dns_proxy(self, vm_name: str) -> None:
        pass

    @abstractmethod
    def get_vm_ip(self, vm_name: str) -> str:
        """IP of the VM on its host-only network."""
        pass

    # ── sizing ───────────────────────────────────────────────────────────────

    @abstractmethod
    def set_cpus(self, vm_name: str, cpus: int) -> None:
        pass

    @abstractmethod
    def set_memory(self, vm_name: str, memory: int) -> None:
        pass

    @abstractmethod
    def get_memory(self, vm_name: str) -> int:
        """Configured memory in MB."""
        pass
