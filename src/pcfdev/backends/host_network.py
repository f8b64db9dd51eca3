"""Host network inspection using psutil and the system ping."""

import socket
import subprocess
import sys
from typing import List

import psutil

from ..interfaces.network import HostNetwork, NetworkInterface
from ..interfaces.process import ProcessRunner


def ping_command(ip: str) -> List[str]:
    """One echo request with a one second wait, in the local ping's dialect."""
    if sys.platform.startswith("win"):
        return ["ping", "-n", "1", "-w", "1000", ip]
    if sys.platform == "darwin":
        return ["ping", "-c", "1", "-t", "1", ip]
    return ["ping", "-c", "1", "-W", "1", ip]


class PsutilHostNetwork(HostNetwork):
    """Lists host interfaces with psutil and probes addresses with ping."""

    def __init__(self, runner: ProcessRunner):
        self.runner = runner

    def interfaces(self) -> List[NetworkInterface]:
        found = []
        for name, addrs in psutil.net_if_addrs().items():
            for addr in addrs:
                if addr.family == socket.AF_INET:
                    found.append(NetworkInterface(name=name, ip=addr.address))
        return found

    def ping(self, ip: str) -> bool:
        try:
            return self.runner.run(ping_command(ip), timeout=5).success
        except subprocess.TimeoutExpired:
            return False
