"""Dependency container wiring the pcfdev interfaces to their implementations."""

import inspect
import sys
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Type, TypeVar

T = TypeVar("T")


@dataclass
class ServiceRegistration:
    """Registration info for a service."""

    factory: Callable[..., Any]
    singleton: bool = True
    instance: Optional[Any] = None
    preset: bool = False


class DependencyContainer:
    """
    Resolves services by the type annotations of their constructors.

    Usage:
        container = DependencyContainer()
        container.register(Config, instance=Config.load())
        container.register(HypervisorDriver, VBoxManageDriver)
        builder = container.resolve(Builder)
    """

    def __init__(self):
        self._registrations: Dict[Type, ServiceRegistration] = {}
        self._lock = threading.RLock()

    def register(
        self,
        interface: Type[T],
        implementation: Type[T] = None,
        factory: Callable[..., T] = None,
        singleton: bool = True,
        instance: T = None,
    ) -> "DependencyContainer":
        """
        Register a service.

        Args:
            interface: The interface/base class
            implementation: Concrete implementation class
            factory: Zero-argument callable building the instance
            singleton: If True, reuse same instance
            instance: Pre-created instance to use
        """
        if instance is not None:
            registration = ServiceRegistration(factory=lambda: instance, instance=instance, preset=True)
        elif factory is not None:
            registration = ServiceRegistration(factory=factory, singleton=singleton)
        elif implementation is not None:
            registration = ServiceRegistration(factory=implementation, singleton=singleton)
        else:
            raise ValueError("Must provide implementation, factory, or instance")

        with self._lock:
            self._registrations[interface] = registration
        return self

    def resolve(self, interface: Type[T]) -> T:
        """Resolve a service instance."""
        with self._lock:
            if interface not in self._registrations:
                # concrete classes without a registration are built on the fly
                if inspect.isclass(interface) and not inspect.isabstract(interface):
                    return self._create_instance(interface)
                raise KeyError(f"No registration for {interface}")

            reg = self._registrations[interface]
            if reg.singleton and reg.instance is not None:
                return reg.instance

            instance = self._create_instance(reg.factory)
            if reg.singleton:
                reg.instance = instance
            return instance

    def _create_instance(self, factory: Callable) -> Any:
        """Call ``factory``, resolving every annotated parameter it declares."""
        kwargs = {}
        for name, param in inspect.signature(factory).parameters.items():
            if param.annotation is inspect.Parameter.empty:
                continue
            if param.annotation not in self._registrations and param.default is not inspect.Parameter.empty:
                continue
            kwargs[name] = self.resolve(param.annotation)
        return factory(**kwargs)

    def has(self, interface: Type) -> bool:
        """Check if service is registered."""
        return interface in self._registrations

    def reset(self) -> None:
        """Drop all singleton instances except pre-created ones."""
        with self._lock:
            for reg in self._registrations.values():
                if not reg.preset:
                    reg.instance = None


_container: Optional[DependencyContainer] = None


def get_container() -> DependencyContainer:
    """Get the global container, creating the default one on first use."""
    global _container
    if _container is None:
        _container = create_default_container()
    return _container


def set_container(container: Optional[DependencyContainer]) -> None:
    """Set the global container (useful for testing)."""
    global _container
    _container = container


def create_default_container(config=None) -> DependencyContainer:
    """Container with the VirtualBox, OpenSSH and local filesystem implementations."""
    from .address import Picker
    from .backends.host_network import PsutilHostNetwork
    from .backends.local_fs import LocalFileSystem
    from .backends.ssh_shell import OpenSSHShell
    from .backends.subprocess_runner import SubprocessRunner
    from .backends.vboxmanage import VBoxManageDriver
    from .config import Config
    from .interfaces.fs import FileSystem
    from .interfaces.hypervisor import HypervisorDriver
    from .interfaces.network import HostNetwork
    from .interfaces.process import ProcessRunner
    from .interfaces.shell import GuestShell
    from .orchestrator import VMOrchestrator
    from .vm.builder import Builder

    if config is None:
        config = Config.load()

    container = DependencyContainer()
    container.register(Config, instance=config)
    container.register(ProcessRunner, SubprocessRunner)
    container.register(HypervisorDriver, VBoxManageDriver)
    container.register(FileSystem, LocalFileSystem)
    container.register(HostNetwork, PsutilHostNetwork)
    container.register(
        GuestShell,
        factory=lambda: OpenSSHShell(container.resolve(ProcessRunner), username=config.ssh_user),
    )
    container.register(Picker, Picker)
    container.register(VMOrchestrator, VMOrchestrator)
    container.register(
        Builder,
        factory=lambda: Builder(
            config,
            container.resolve(HypervisorDriver),
            container.resolve(GuestShell),
            container.resolve(FileSystem),
            container.resolve(VMOrchestrator),
            stdout=sys.stdout,
            stderr=sys.stderr,
        ),
    )
    return container
