"""
Fixed address pool for the guest's host-only network.

Every allowed subnet is ``192.168.NN.0/24`` with ``NN`` in 11, 22 ... 99. The
guest always takes ``.11`` and the host-side interface the gateway ``.1``.
"""

from typing import Dict, List, Optional

from pcfdev.errors import InvalidIPError, NoAvailableNetworkError
from pcfdev.interfaces.hypervisor import HypervisorDriver
from pcfdev.interfaces.network import HostNetwork, NetworkInterface
from pcfdev.logging import get_logger

log = get_logger(__name__)

SUBNET_OCTETS = [11, 22, 33, 44, 55, 66, 77, 88, 99]

VM_IPS: List[str] = [f"192.168.{n}.11" for n in SUBNET_OCTETS]
GATEWAY_IPS: List[str] = [f"192.168.{n}.1" for n in SUBNET_OCTETS]
DOMAINS: Dict[str, str] = {
    ip: "local.pcfdev.io" if n == 11 else f"local{n // 11}.pcfdev.io"
    for ip, n in zip(VM_IPS, SUBNET_OCTETS)
}


def domain_for_ip(ip: str) -> str:
    """192.168.11.11 -> local.pcfdev.io, 192.168.22.11 -> local2.pcfdev.io, ..."""
    try:
        return DOMAINS[ip]
    except KeyError:
        raise InvalidIPError(ip) from None


def subnet_for_ip(ip: str) -> str:
    """Gateway address of the subnet a guest IP belongs to."""
    try:
        return GATEWAY_IPS[VM_IPS.index(ip)]
    except ValueError:
        raise InvalidIPError(ip) from None


def ip_for_subnet(gateway: str) -> str:
    """Guest address for a gateway address."""
    try:
        return VM_IPS[GATEWAY_IPS.index(gateway)]
    except ValueError:
        raise InvalidIPError(gateway) from None


class Picker:
    """Chooses the first subnet of the pool nothing else is using."""

    def __init__(self, driver: HypervisorDriver, network: HostNetwork):
        self.driver = driver
        self.network = network

    def select_available_ip(self, vbox_interfaces: List[NetworkInterface]) -> str:
        """Return the gateway IP of the first free subnet.

        ``vbox_interfaces`` are the host-only interfaces VirtualBox already
        knows about. An existing VirtualBox interface on a subnet is fine as
        long as no VM uses it; a non-VirtualBox host interface on the subnet,
        or a guest address that answers a ping, takes it out of the running.
        """
        vbox_names = {iface.name for iface in vbox_interfaces}
        host_interfaces = [
            iface for iface in self.network.interfaces() if iface.name not in vbox_names
        ]

        for gateway in GATEWAY_IPS:
            if self._taken_by_host(gateway, host_interfaces):
                log.debug("subnet_skipped", gateway=gateway, reason="host_interface")
                continue

            vbox_iface = self._find(gateway, vbox_interfaces)
            if vbox_iface is not None and self.driver.is_interface_in_use(vbox_iface.name):
                log.debug("subnet_skipped", gateway=gateway, reason="interface_in_use")
                continue

            if self.network.ping(ip_for_subnet(gateway)):
                log.debug("subnet_skipped", gateway=gateway, reason="address_answers")
                continue

            log.info("subnet_selected", gateway=gateway)
            return gateway

        raise NoAvailableNetworkError()

    @staticmethod
    def _find(ip: str, interfaces: List[NetworkInterface]) -> Optional[NetworkInterface]:
        for iface in interfaces:
            if iface.ip == ip:
                return iface
        return None

    def _taken_by_host(self, ip: str, host_interfaces: List[NetworkInterface]) -> bool:
        return self._find(ip, host_interfaces) is not None
