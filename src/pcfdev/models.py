"""
Pydantic models for the values passed between the lifecycle layers.
"""

import json
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class VMConfig(BaseModel):
    """Identity and runtime parameters of one VM."""

    name: str = Field(description="VM name, prefixed to mark it as ours")
    ip: str = Field(default="", description="Guest address on the host-only network")
    domain: str = Field(default="", description="DNS domain derived from the IP")
    ssh_port: str = Field(default="", description="Host port forwarded to guest port 22")
    memory: int = Field(default=0, ge=0, description="Memory in MB")
    cpus: int = Field(default=0, ge=0, description="Number of CPUs")
    ova_path: Optional[Path] = Field(default=None, description="Source disk image")

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("VM name cannot be empty")
        return v.strip()


class StartOpts(BaseModel):
    """User overrides supplied to ``pcfdev start``.

    Zero means "not supplied" for memory and cpus. Negative cpus are kept so
    that validation can reject them with a readable message.
    """

    memory: int = 0
    cpus: int = 0
    ova_path: Optional[Path] = None
    services: str = ""
    registries: List[str] = Field(default_factory=list)


class NetworkConfig(BaseModel):
    """Per-VM record persisted on the host as ``vm_config.json``."""

    ip: str
    domain: str

    @classmethod
    def from_json(cls, data) -> "NetworkConfig":
        return cls.model_validate_json(data)

    def to_json(self) -> str:
        return json.dumps({"ip": self.ip, "domain": self.domain})


class ProvisionOptions(BaseModel):
    """Arguments for the guest provisioner, stored at /var/pcfdev/provision-options.json."""

    domain: str
    ip: str
    services: str = ""
    registries: List[str] = Field(default_factory=list)

    def to_json(self) -> str:
        return json.dumps(
            {
                "domain": self.domain,
                "ip": self.ip,
                "services": self.services,
                "registries": self.registries,
            }
        )
