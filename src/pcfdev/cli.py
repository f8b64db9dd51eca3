#!/usr/bin/env python3
"""
Command-line interface for PCF Dev.

Every command resolves the VM name, asks the Builder for the VM's current
variant and invokes one operation on it. The variants never print; this module
shows what they return.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

import questionary
from questionary import Style
from rich.console import Console
from rich.markup import escape

from pcfdev import __version__
from pcfdev.config import Config
from pcfdev.di import get_container
from pcfdev.interfaces.fs import FileSystem
from pcfdev.logging import configure_logging, get_logger
from pcfdev.models import StartOpts
from pcfdev.orchestrator import VMOrchestrator
from pcfdev.vm.builder import Builder

console = Console()
log = get_logger(__name__)

custom_style = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "bold"),
        ("answer", "fg:green"),
        ("instruction", "fg:gray italic"),
    ]
)


def resolve_vm_name(args) -> str:
    """The VM we already own, otherwise the name a fresh import would get."""
    container = get_container()
    name = container.resolve(VMOrchestrator).get_vm_name()
    if name:
        return name
    config = container.resolve(Config)
    if getattr(args, "ova", None):
        return config.custom_vm_name
    return config.default_vm_name


def current_vm(args):
    name = resolve_vm_name(args)
    vm = get_container().resolve(Builder).vm(name)
    log.debug("vm_resolved", vm_name=name, variant=type(vm).__name__)
    return vm


def say(message: Optional[str]) -> None:
    if message:
        console.print(escape(message))


# ── commands ─────────────────────────────────────────────────────────────────


def cmd_start(args):
    """Import (if needed), boot and provision the VM."""
    opts = StartOpts(
        memory=args.memory or 0,
        cpus=args.cpus or 0,
        ova_path=Path(args.ova).expanduser().resolve() if args.ova else None,
        services=args.services or "",
        registries=args.registry or [],
    )
    vm = current_vm(args)
    vm.verify_start_opts(opts)
    say(vm.start(opts))


def cmd_stop(args):
    say(current_vm(args).stop())


def cmd_suspend(args):
    say(current_vm(args).suspend())


def cmd_resume(args):
    say(current_vm(args).resume())


def cmd_status(args):
    say(current_vm(args).status())


def cmd_provision(args):
    say(current_vm(args).provision(sys.stdout, sys.stderr))


def cmd_destroy(args):
    """Remove every PCF Dev VM and disk, then the VM directory."""
    if not args.yes:
        confirmed = questionary.confirm(
            "Destroy all PCF Dev VMs and their disks?",
            default=False,
            style=custom_style,
        ).ask()
        if not confirmed:
            console.print("[yellow]Aborted.[/]")
            return

    container = get_container()
    config = container.resolve(Config)
    container.resolve(VMOrchestrator).destroy_owned_vms()
    container.resolve(FileSystem).remove(str(config.vm_dir))
    say("PCF Dev VM has been destroyed.")


def cmd_version(args):
    say(f"PCF Dev version {__version__}")


# ── parser ───────────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pcfdev", description="Run a local Cloud Foundry in a VirtualBox VM"
    )
    parser.add_argument("--version", action="version", version=f"pcfdev {__version__}")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Diagnostic log level (default: WARNING)",
    )
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON on stderr")
    parser.add_argument("--log-file", type=Path, help="Also write JSON logs to this file")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    start_parser = subparsers.add_parser("start", help="Start the PCF Dev VM")
    start_parser.add_argument("--memory", "-m", type=int, help="Memory in MB (new VMs only)")
    start_parser.add_argument("--cpus", "-c", type=int, help="Number of CPUs (new VMs only)")
    start_parser.add_argument("--ova", "-o", help="Path to a custom OVA")
    start_parser.add_argument("--services", "-s", help="Comma-separated services to deploy")
    start_parser.add_argument(
        "--registry", "-r", action="append", help="Insecure Docker registry (repeatable)"
    )
    start_parser.set_defaults(func=cmd_start)

    subparsers.add_parser("stop", help="Shut the VM down").set_defaults(func=cmd_stop)
    subparsers.add_parser("suspend", help="Save the VM's state").set_defaults(func=cmd_suspend)
    subparsers.add_parser("resume", help="Resume a suspended VM").set_defaults(func=cmd_resume)
    subparsers.add_parser("status", help="Show the VM's state").set_defaults(func=cmd_status)
    subparsers.add_parser(
        "provision", help="Re-run provisioning in a running VM"
    ).set_defaults(func=cmd_provision)

    destroy_parser = subparsers.add_parser("destroy", help="Delete all PCF Dev VMs")
    destroy_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    destroy_parser.set_defaults(func=cmd_destroy)

    subparsers.add_parser("version", help="Show the version").set_defaults(func=cmd_version)
    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, json_output=args.json_logs, log_file=args.log_file)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/]")
        sys.exit(1)
    except Exception as e:
        if args.log_level == "DEBUG":
            console.print_exception()
        console.print(f"[red]Error: {escape(str(e).rstrip('.'))}.[/]")
        sys.exit(1)


if __name__ == "__main__":
    main()
