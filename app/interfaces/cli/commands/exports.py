"""
Manage the per-kind CSV/Excel export tables
"""

import asyncio
from typing import List, Optional

from app.core.config import get_settings
from app.core.enums import RecordKind
from app.infrastructure.export import TabularExportManager
from app.interfaces.cli.commands.base import BaseCommand


class Command(BaseCommand):
    description = "Create, rebuild or inspect the CSV/Excel export tables"

    def add_arguments(self, parser):
        parser.add_argument(
            "--init",
            action="store_true",
            help="Create header-only workbooks for kinds that have none"
        )
        parser.add_argument(
            "--rebuild",
            choices=[kind.value for kind in RecordKind] + ["all"],
            help="Regenerate workbooks from their CSV files"
        )
        parser.add_argument(
            "--status",
            action="store_true",
            help="Show file locations and row counts"
        )
        parser.add_argument(
            "--directory",
            help="Export directory (default: EXPORT_DIRECTORY setting)"
        )

    def handle(self, **kwargs) -> Optional[int]:
        settings = get_settings().export
        if kwargs.get("directory"):
            settings = settings.model_copy(update={"directory": kwargs["directory"]})
        manager = TabularExportManager.from_settings(settings)

        if not (kwargs.get("init") or kwargs.get("rebuild") or kwargs.get("status")):
            self.help()
            return 1

        failed = False
        if kwargs.get("init"):
            if asyncio.run(manager.initialize()):
                self.print_success(f"Export tables initialized in {manager.directory}")
            else:
                self.print_error(f"Export tables could not be initialized in {manager.directory}")
                failed = True

        if kwargs.get("rebuild"):
            for kind in self._kinds(kwargs["rebuild"]):
                if asyncio.run(manager.regenerate_spreadsheet(kind)):
                    self.print_success(f"{kind.label} workbook regenerated")
                else:
                    self.print_error(f"{kind.label} workbook could not be regenerated")
                    failed = True

        if kwargs.get("status"):
            self._print_status(manager)

        return 1 if failed else 0

    def _kinds(self, selection: str) -> List[RecordKind]:
        if selection == "all":
            return list(RecordKind)
        return [RecordKind(selection)]

    def _print_status(self, manager: TabularExportManager):
        self.print_info(f"Export directory: {manager.directory} (update mode: {manager.update_mode.value})")
        for kind in RecordKind:
            status = manager.status(kind)
            csv_state = f"{status['rows']} rows" if status["csv_exists"] else "no CSV yet"
            workbook_state = "present" if status["workbook_exists"] else "missing"
            print(f"  {kind.value:<10} {csv_state:<15} workbook {workbook_state}")
