"""
PCF Dev - run a local Cloud Foundry in a single VirtualBox VM.

Imports, boots, provisions and tears down the PCF Dev VM by driving
VBoxManage and an SSH client against the guest.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
