"""
Base class for all CLI commands
"""

import argparse
from abc import ABC, abstractmethod
from typing import List, Optional


class BaseCommand(ABC):
    """Base class for all commands"""

    description = "No description provided"

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            description=self.description,
            add_help=False
        )
        self.add_arguments(parser)
        return parser

    def add_arguments(self, parser: argparse.ArgumentParser):
        """Override to add command-specific arguments"""
        pass

    @abstractmethod
    def handle(self, **kwargs) -> Optional[int]:
        pass

    def run(self, args: List[str]) -> Optional[int]:
        """Parse arguments and run the command"""
        parsed_args = self.parser.parse_args(args)
        return self.handle(**vars(parsed_args))

    def help(self):
        self.parser.print_help()

    def print_success(self, message: str):
        print(f"\033[92m✓ {message}\033[0m")

    def print_error(self, message: str):
        print(f"\033[91m✗ {message}\033[0m")

    def print_warning(self, message: str):
        print(f"\033[93m⚠ {message}\033[0m")

    def print_info(self, message: str):
        print(f"\033[94mℹ {message}\033[0m")
