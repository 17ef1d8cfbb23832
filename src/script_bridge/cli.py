"""
Command-line interface for the script bridge.

Provides CLI commands for script authors:
- check: Load world scripts and report how their triggers bind
- events: List the bundled event kinds with their switches and contexts
- commands: List the bundled commands with their syntax

Usage:
    script-bridge check [PATH ...] [--strict]
    script-bridge events
    script-bridge commands

Environment Variables:
    BRIDGE_SCRIPTS_ROOT: Default scripts directory for ``check``
    BRIDGE_LOG_LEVEL: Logging level (default: INFO)
"""

import argparse
import sys
from functools import partial
from pathlib import Path

from script_bridge.config import config, configure_logging


def _load(path: Path) -> list:
    from script_bridge.events import load_scripts_dir, load_world_scripts

    if path.is_dir():
        return load_scripts_dir(path)
    return load_world_scripts(path)


def cmd_check(args: argparse.Namespace) -> int:
    """
    Load world scripts and bind their triggers to the bundled events.

    Returns:
        0 when every file loads (and, with --strict, every trigger binds),
        1 otherwise
    """
    from script_bridge.errors import ScriptLoadError
    from script_bridge.events import create_dispatcher, determine_executor

    paths = [Path(p) for p in args.paths] or [config.scripts.absolute_root]
    dispatcher = create_dispatcher()
    failed = False
    unbound = 0

    for path in paths:
        try:
            scripts = _load(path)
        except (FileNotFoundError, ScriptLoadError) as e:
            print(f"Error: {e}", file=sys.stderr)
            failed = True
            continue

        for script in scripts:
            print(f"{script.name} ({script.path})")
            for declaration in script.declarations:
                handler = partial(determine_executor, declaration)
                bound = dispatcher.add_trigger(declaration, handler)
                target = ", ".join(bound) if bound else "NO MATCHING EVENT"
                print(f"  line {declaration.line}: {declaration.event_lower} -> {target}")
                if not bound:
                    unbound += 1

    if unbound:
        print(f"\n{unbound} trigger(s) matched no event.")
    if failed or (args.strict and unbound):
        return 1
    return 0


def cmd_events(args: argparse.Namespace) -> int:
    """Print every bundled event kind with its documentation."""
    from script_bridge.events import core_events

    for script_event in core_events():
        docs = script_event.docs
        print(f"{script_event.name} [{docs.group}]")
        for form in docs.events:
            print(f"  on {form}")
        print(f"  Triggers {docs.triggers}")
        for switch, description in docs.switches:
            print(f"  switch {switch}  {description}")
        for key, description in docs.context:
            print(f"  {key}  {description}")
        for form in docs.determine:
            print(f"  determine {form}")
        print(f"  Cancellable: {'yes' if docs.cancellable else 'no'}")
    return 0


def cmd_commands(args: argparse.Namespace) -> int:
    """Print every bundled command's syntax and argument counts."""
    from script_bridge.commands import create_registry

    for command in create_registry():
        signature = command.signature
        maximum = "any" if signature.max_args < 0 else str(signature.max_args)
        print(f"{signature.name}: {signature.syntax}")
        print(f"  arguments: {signature.min_args}..{maximum}")
        for param in signature.params:
            names = "/".join(param.names)
            required = "required" if param.required else "optional"
            print(f"  {names} ({param.role.value}, {param.kind_name}, {required})")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="script-bridge",
        description="Script bridge - check world scripts and list events and commands",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Load world scripts and report trigger bindings",
        description=(
            "Load world-script YAML files or directories and bind every trigger "
            "to the bundled event kinds. Defaults to the configured scripts root."
        ),
    )
    check_parser.add_argument("paths", nargs="*", help="Script files or directories")
    check_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when a trigger matches no event",
    )
    check_parser.set_defaults(func=cmd_check)

    # events command
    events_parser = subparsers.add_parser("events", help="List bundled event kinds")
    events_parser.set_defaults(func=cmd_events)

    # commands command
    commands_parser = subparsers.add_parser("commands", help="List bundled commands")
    commands_parser.set_defaults(func=cmd_commands)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
