"""
Host-side configuration for PCF Dev.

Defaults come from the environment; ``$PCFDEV_HOME/config.yaml`` may override
any field.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import psutil
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from pcfdev.errors import ConfigError
from pcfdev.logging import get_logger

log = get_logger(__name__)

CONFIG_FILE_NAME = "config.yaml"


def _env(*names: str) -> str:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return ""


def default_home() -> Path:
    """~/.pcfdev unless PCFDEV_HOME says otherwise."""
    return Path(os.getenv("PCFDEV_HOME", str(Path.home() / ".pcfdev")))


def total_host_memory_mb() -> int:
    return psutil.virtual_memory().total // (1024 * 1024)


class Config(BaseModel):
    """Paths, proxy settings and sizing defaults used by every command."""

    home: Path = Field(default_factory=default_home)
    vm_dir: Optional[Path] = None
    ova_dir: Optional[Path] = None
    private_key_path: Optional[Path] = None
    insecure_private_key_path: Optional[Path] = None

    vm_prefix: str = "pcfdev-"
    default_vm_name: str = "pcfdev-default"
    custom_vm_name: str = "pcfdev-custom"
    ssh_user: str = "vcap"

    http_proxy: str = Field(default_factory=lambda: _env("HTTP_PROXY", "http_proxy"))
    https_proxy: str = Field(default_factory=lambda: _env("HTTPS_PROXY", "https_proxy"))
    no_proxy: str = Field(default_factory=lambda: _env("NO_PROXY", "no_proxy"))

    min_memory: int = Field(default=3072, ge=1)
    max_memory: int = Field(default=4096, ge=1)
    default_cpus: int = Field(default=2, ge=1)

    @field_validator("default_vm_name", "custom_vm_name")
    @classmethod
    def vm_name_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("VM name cannot be empty")
        return v.strip()

    @model_validator(mode="after")
    def fill_derived_paths(self) -> "Config":
        if self.vm_dir is None:
            self.vm_dir = self.home / "vms"
        if self.ova_dir is None:
            self.ova_dir = self.home / "ova"
        if self.private_key_path is None:
            self.private_key_path = self.home / "key.pem"
        if self.insecure_private_key_path is None:
            insecure = os.getenv("PCFDEV_INSECURE_KEY")
            self.insecure_private_key_path = (
                Path(insecure) if insecure else self.home / "insecure.key"
            )
        if not self.default_vm_name.startswith(self.vm_prefix):
            raise ValueError(f"default_vm_name must start with '{self.vm_prefix}'")
        if not self.custom_vm_name.startswith(self.vm_prefix):
            raise ValueError(f"custom_vm_name must start with '{self.vm_prefix}'")
        if self.min_memory > self.max_memory:
            raise ValueError("min_memory must not exceed max_memory")
        return self

    @property
    def default_ova_path(self) -> Path:
        return self.ova_dir / f"{self.default_vm_name}.ova"

    @property
    def default_memory(self) -> int:
        """Half of the host's memory, clamped to [min_memory, max_memory]."""
        half = total_host_memory_mb() // 2
        return max(self.min_memory, min(half, self.max_memory))

    def insecure_private_key(self) -> bytes:
        """Key baked into the image, used until our own key is injected."""
        return self.insecure_private_key_path.read_bytes()

    def is_owned(self, vm_name: str) -> bool:
        return vm_name.startswith(self.vm_prefix)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """Build the config from the environment plus an optional YAML file."""
        if path is None:
            path = default_home() / CONFIG_FILE_NAME
        data: Dict[str, Any] = {}
        if path.exists():
            try:
                raw = yaml.safe_load(path.read_text())
            except yaml.YAMLError as e:
                raise ConfigError(f"Failed to read config file {path}: {e}") from e
            if raw is not None and not isinstance(raw, dict):
                raise ConfigError(f"Config file {path} must be a YAML mapping")
            data = raw or {}
            log.debug("config_file_loaded", path=str(path), keys=sorted(data))
        try:
            return cls.model_validate(data)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration in {path}: {e}") from e
