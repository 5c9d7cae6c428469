#!/usr/bin/env python3
"""
Management CLI entry point.

Commands live in ``app/interfaces/cli/commands``; every module there
that defines a ``Command`` class is available by its module name.
"""

import argparse
import importlib
import sys
from pathlib import Path
from typing import Dict, List, Type

from app.interfaces.cli.commands.base import BaseCommand

COMMANDS_PACKAGE = "app.interfaces.cli.commands"


class CLIManager:
    def __init__(self):
        self.commands_dir = Path(__file__).parent / "commands"
        self.available_commands = self._discover_commands()

    def _discover_commands(self) -> Dict[str, Type[BaseCommand]]:
        """Discover all commands in the commands folder"""
        commands = {}

        if not self.commands_dir.exists():
            return commands

        for file_path in sorted(self.commands_dir.glob("*.py")):
            if file_path.name.startswith("_") or file_path.stem == "base":
                continue

            module_name = file_path.stem
            try:
                module = importlib.import_module(f"{COMMANDS_PACKAGE}.{module_name}")
            except ImportError as e:
                print(f"Warning: Could not load command '{module_name}': {e}")
                continue

            if hasattr(module, "Command"):
                commands[module_name] = module.Command

        return commands

    def list_commands(self):
        print("Available commands:")
        print("=" * 40)

        if not self.available_commands:
            print("No commands found.")
            return

        for name, command_class in self.available_commands.items():
            description = getattr(command_class, "description", "No description")
            print(f"  {name:<20} {description}")

    def run_command(self, command_name: str, args: List[str]) -> int:
        if command_name not in self.available_commands:
            print(f"Unknown command: {command_name}")
            print("Use 'python manage.py help' to see available commands.")
            return 1

        command_instance = self.available_commands[command_name]()
        try:
            return command_instance.run(args) or 0
        except Exception as e:
            command_instance.print_error(f"Error running command '{command_name}': {e}")
            return 1


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Faculty Incentive Tracker management tool",
        add_help=False
    )
    parser.add_argument("command", nargs="?", help="Command to run")
    parser.add_argument("args", nargs="*", help="Arguments for the command")

    # command-specific options are passed through untouched
    args, unknown = parser.parse_known_args(argv)
    all_args = args.args + unknown

    cli_manager = CLIManager()

    if not args.command or args.command == "help":
        if all_args:
            command_name = all_args[0]
            if command_name in cli_manager.available_commands:
                cli_manager.available_commands[command_name]().help()
            else:
                print(f"Unknown command: {command_name}")
        else:
            print("Usage: python manage.py <command> [args...]")
            print()
            cli_manager.list_commands()
            print()
            print("Use 'python manage.py help <command>' for help on a specific command.")
        return 0

    return cli_manager.run_command(args.command, all_args)


if __name__ == "__main__":
    sys.exit(main())
