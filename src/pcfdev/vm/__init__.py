"""Lifecycle variants of a PCF Dev VM and the Builder that picks one."""

from pcfdev.vm.base import VM
from pcfdev.vm.builder import Builder
from pcfdev.vm.invalid import Invalid
from pcfdev.vm.not_created import NotCreated
from pcfdev.vm.running import Running
from pcfdev.vm.stopped import Stopped
from pcfdev.vm.suspended import Suspended
from pcfdev.vm.unprovisioned import Unprovisioned

__all__ = [
    "VM",
    "Builder",
    "Invalid",
    "NotCreated",
    "Running",
    "Stopped",
    "Suspended",
    "Unprovisioned",
]
