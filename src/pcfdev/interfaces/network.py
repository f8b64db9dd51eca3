"""Interfaces for PCF Dev host network inspection."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List


@dataclass
class NetworkInterface:
    """A host-side network adapter and the IPv4 address it carries."""

    name: str
    ip: str


class HostNetwork(ABC):
    """Abstract interface for looking at the host's own networking."""

    @abstractmethod
    def interfaces(self) -> List[NetworkInterface]:
        """All host interfaces with an IPv4 address."""
        pass

    @abstractmethod
    def ping(self, ip: str) -> bool:
        """True when ``ip`` answers a single echo request."""
        pass
