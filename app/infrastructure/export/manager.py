"""
Tabular export manager.

Keeps, per record kind, a CSV file as the source of truth and an
``.xlsx`` workbook regenerated from that CSV after every write.
"""

import asyncio
import logging
import os
import shutil
import tempfile
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter

from ...core.config import ExportSettings
from ...core.enums import ExportUpdateMode, RecordKind
from ...core.exceptions import CSVParseError, ExportError
from ...domain.entities.base import IncentiveRecord
from .csv_codec import format_line, format_value, join_lines, parse_line, split_lines
from .schema import SUBMISSION_DATE, ExportColumn, schema_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportTarget:
    """Immutable file layout and schema of one kind's export table."""

    kind: RecordKind
    columns: Tuple[ExportColumn, ...]
    csv_path: Path
    workbook_path: Path
    backup_path: Path
    sheet_name: str

    @property
    def headers(self) -> List[str]:
        return [column.header for column in self.columns]

    @property
    def keys(self) -> List[str]:
        return [column.key for column in self.columns]

    @property
    def header_line(self) -> str:
        return format_line(self.headers)


class TabularExportManager:
    """
    Mirrors records into per-kind CSV files and derived workbooks.

    Every write copies the CSV to a one-generation backup, rewrites the
    whole CSV (header, prior rows, new row) through a temp file and
    rebuilds the workbook from the result. Writes for the same kind are
    serialised behind a per-kind lock unless ``serialize_writes`` is off.
    Public write methods never raise: failures are logged and reported
    as ``False``.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        backup_suffix: str = ".bak",
        encoding: str = "utf-8",
        update_mode: ExportUpdateMode = ExportUpdateMode.APPEND,
        serialize_writes: bool = True,
    ):
        self.directory = Path(directory)
        self.encoding = encoding
        self.update_mode = ExportUpdateMode(update_mode)
        self.serialize_writes = serialize_writes
        self.targets: Dict[RecordKind, ExportTarget] = {
            kind: self._build_target(kind, backup_suffix) for kind in RecordKind
        }
        self._locks: Dict[RecordKind, asyncio.Lock] = {kind: asyncio.Lock() for kind in RecordKind}

    @classmethod
    def from_settings(cls, settings: ExportSettings) -> "TabularExportManager":
        return cls(
            directory=settings.directory,
            backup_suffix=settings.backup_suffix,
            encoding=settings.encoding,
            update_mode=settings.update_mode,
            serialize_writes=settings.serialize_writes,
        )

    def _build_target(self, kind: RecordKind, backup_suffix: str) -> ExportTarget:
        csv_path = self.directory / f"{kind.value}.csv"
        return ExportTarget(
            kind=kind,
            columns=schema_for(kind),
            csv_path=csv_path,
            workbook_path=self.directory / f"{kind.value}.xlsx",
            backup_path=csv_path.with_name(csv_path.name + backup_suffix),
            sheet_name=kind.label,
        )

    def target(self, kind: RecordKind) -> ExportTarget:
        return self.targets[RecordKind(kind)]

    # ------------------------------------------------------------------
    # Public async API
    # ------------------------------------------------------------------

    async def initialize(self) -> bool:
        """
        Create a header-only workbook for every kind that has none yet.

        Returns False, after logging, when the export directory cannot be
        prepared.
        """
        try:
            await asyncio.to_thread(self._initialize_sync)
        except OSError:
            logger.exception(f"Could not initialize export tables in {self.directory}")
            return False
        return True

    async def append_entry(self, kind: RecordKind, record: IncentiveRecord) -> bool:
        """Append one row for ``record`` and regenerate the workbook."""
        return await self._write(RecordKind(kind), record, replace_existing=False)

    async def record_update(self, kind: RecordKind, record: IncentiveRecord) -> bool:
        """Export an updated record according to the configured update mode."""
        replace = self.update_mode is ExportUpdateMode.UPSERT
        return await self._write(RecordKind(kind), record, replace_existing=replace)

    async def regenerate_spreadsheet(self, kind: RecordKind) -> bool:
        target = self.target(kind)
        async with self._lock_for(target.kind):
            try:
                count = await asyncio.to_thread(self._regenerate_sync, target)
            except Exception:
                logger.exception(f"Failed to regenerate {target.workbook_path}")
                return False
        logger.info(f"Regenerated {target.workbook_path.name} with {count} rows")
        return True

    async def read_rows(self, kind: RecordKind) -> List[Dict[str, str]]:
        """Parsed CSV data rows keyed by header (whitespace removed), oldest first."""
        return await asyncio.to_thread(self._read_rows_sync, self.target(kind))

    async def latest_rows(self, kind: RecordKind) -> List[Dict[str, str]]:
        """CSV rows reduced to the most recently written row per Entry ID."""
        target = self.target(kind)
        id_key = target.columns[0].key
        latest: Dict[str, Dict[str, str]] = {}
        for row in await self.read_rows(kind):
            latest.pop(row[id_key], None)
            latest[row[id_key]] = row
        return list(latest.values())

    async def read_spreadsheet(self, kind: RecordKind) -> List[Dict[str, str]]:
        """Workbook data rows keyed by header (whitespace removed)."""
        frame = await asyncio.to_thread(self._load_workbook_frame, self.target(kind))
        return frame.to_dict(orient="records")

    async def preview(
        self,
        kind: RecordKind,
        rows: int = 10,
        latest_only: bool = False,
    ) -> Dict[str, Any]:
        target = self.target(kind)
        frame = await asyncio.to_thread(self._load_workbook_frame, target)
        history = len(frame)
        if latest_only and history:
            frame = frame.drop_duplicates(subset=target.keys[0], keep="last")
        return {
            "kind": target.kind.value,
            "sheet": target.sheet_name,
            "columns": target.headers,
            "total_rows": len(frame),
            "history_rows": history,
            "rows": frame.head(rows).to_dict(orient="records"),
        }

    def status(self, kind: RecordKind) -> Dict[str, Any]:
        target = self.target(kind)
        rows = self._read_data_lines(target) if target.csv_path.exists() else []
        return {
            "kind": target.kind.value,
            "csv_path": str(target.csv_path),
            "csv_exists": target.csv_path.exists(),
            "rows": len(rows),
            "backup_exists": target.backup_path.exists(),
            "workbook_path": str(target.workbook_path),
            "workbook_exists": target.workbook_path.exists(),
        }

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def _lock_for(self, kind: RecordKind):
        return self._locks[kind] if self.serialize_writes else nullcontext()

    async def _write(self, kind: RecordKind, record: IncentiveRecord, replace_existing: bool) -> bool:
        target = self.target(kind)
        async with self._lock_for(kind):
            try:
                await asyncio.to_thread(self._write_entry_sync, target, record, replace_existing)
            except Exception:
                logger.exception(
                    f"Failed to export {target.kind.label} entry {getattr(record, 'id', '?')}"
                )
                return False
        return True

    def build_row(self, target: ExportTarget, record: IncentiveRecord, submitted_at: str) -> List[str]:
        """Serialise ``record`` into the target's column order."""
        values = []
        for column in target.columns:
            if column.attribute == SUBMISSION_DATE:
                values.append(submitted_at)
            else:
                values.append(format_value(getattr(record, column.attribute, None)))
        return values

    def _write_entry_sync(self, target: ExportTarget, record: IncentiveRecord, replace_existing: bool) -> None:
        submitted_at = datetime.now(timezone.utc).isoformat()
        new_line = format_line(self.build_row(target, record, submitted_at))

        self.directory.mkdir(parents=True, exist_ok=True)
        self._backup(target)

        try:
            prior = self._read_data_lines(target)
        except OSError as e:
            raise ExportError(f"Could not read {target.csv_path}: {e}", kind=target.kind.value, step="read") from e

        if replace_existing:
            lines = self._replace_entry(prior, str(record.id), new_line)
        else:
            lines = prior + [new_line]

        try:
            self._atomic_write_text(target.csv_path, join_lines([target.header_line] + lines))
        except OSError as e:
            raise ExportError(f"Could not rewrite {target.csv_path}: {e}", kind=target.kind.value, step="rewrite") from e

        logger.info(
            f"{target.kind.label} entry {record.id} exported "
            f"({len(lines)} data rows in {target.csv_path.name})"
        )
        self._regenerate_sync(target)

    def _backup(self, target: ExportTarget) -> None:
        if not target.csv_path.exists():
            return
        try:
            shutil.copyfile(target.csv_path, target.backup_path)
        except OSError as e:
            raise ExportError(f"Could not back up {target.csv_path}: {e}", kind=target.kind.value, step="backup") from e
        logger.debug(f"Backed up {target.csv_path.name} to {target.backup_path.name}")

    def _replace_entry(self, lines: Sequence[str], entry_id: str, new_line: str) -> List[str]:
        result: List[str] = []
        replaced = False
        for line in lines:
            if self._entry_id(line) == entry_id:
                if not replaced:
                    result.append(new_line)
                    replaced = True
                continue
            result.append(line)
        if not replaced:
            result.append(new_line)
        return result

    @staticmethod
    def _entry_id(line: str) -> Optional[str]:
        try:
            return parse_line(line)[0]
        except CSVParseError:
            return None

    def _read_data_lines(self, target: ExportTarget) -> List[str]:
        if not target.csv_path.exists():
            return []
        lines = split_lines(target.csv_path.read_text(encoding=self.encoding))
        if lines and self._entry_id(lines[0]) == target.headers[0]:
            lines = lines[1:]
        return lines

    def _atomic_write_text(self, path: Path, content: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding=self.encoding, newline="") as handle:
                handle.write(content)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    # ------------------------------------------------------------------
    # Workbook
    # ------------------------------------------------------------------

    def _initialize_sync(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        for target in self.targets.values():
            if target.workbook_path.exists():
                continue
            self._write_workbook(target, [])
            logger.info(f"{target.sheet_name} workbook created at {target.workbook_path}")

    def _parse_data_rows(self, target: ExportTarget) -> List[List[str]]:
        rows = []
        width = len(target.columns)
        for number, line in enumerate(self._read_data_lines(target), start=2):
            try:
                rows.append(parse_line(line, expected_fields=width))
            except CSVParseError as e:
                logger.warning(f"Skipping corrupt row {number} in {target.csv_path.name}: {e}")
        return rows

    def _read_rows_sync(self, target: ExportTarget) -> List[Dict[str, str]]:
        keys = target.keys
        return [dict(zip(keys, values)) for values in self._parse_data_rows(target)]

    def _regenerate_sync(self, target: ExportTarget) -> int:
        try:
            rows = self._parse_data_rows(target)
        except OSError as e:
            raise ExportError(f"Could not read {target.csv_path}: {e}", kind=target.kind.value, step="parse") from e

        rows = [row for row in rows if self._storable(target, row)]
        try:
            self._write_workbook(target, rows)
        except Exception as e:
            raise ExportError(
                f"Could not write {target.workbook_path}: {e}", kind=target.kind.value, step="workbook"
            ) from e
        return len(rows)

    @staticmethod
    def _storable(target: ExportTarget, row: List[str]) -> bool:
        if any(ILLEGAL_CHARACTERS_RE.search(value) for value in row):
            logger.warning(
                f"Skipping row {row[0]} in {target.csv_path.name}: contains characters not allowed in worksheets"
            )
            return False
        return True

    def _write_workbook(self, target: ExportTarget, rows: List[List[str]]) -> None:
        frame = pd.DataFrame(rows, columns=target.headers, dtype=object)
        target.workbook_path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=target.workbook_path.parent, prefix=f".{target.workbook_path.stem}.", suffix=".xlsx"
        )
        os.close(fd)
        try:
            with pd.ExcelWriter(tmp_name, engine="openpyxl") as writer:
                frame.to_excel(writer, sheet_name=target.sheet_name, index=False)
                worksheet = writer.sheets[target.sheet_name]
                # every value is text; a leading "=" must not become a formula
                for cells in worksheet.iter_rows(min_row=2):
                    for cell in cells:
                        if cell.data_type == "f":
                            cell.data_type = "s"
                for idx, column in enumerate(target.columns, 1):
                    worksheet.column_dimensions[get_column_letter(idx)].width = column.width
            os.replace(tmp_name, target.workbook_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _load_workbook_frame(self, target: ExportTarget) -> pd.DataFrame:
        if not target.workbook_path.exists():
            raise FileNotFoundError(str(target.workbook_path))
        frame = pd.read_excel(
            target.workbook_path,
            sheet_name=target.sheet_name,
            dtype=str,
            keep_default_na=False,
            engine="openpyxl",
        )
        frame = frame.fillna("")
        frame.columns = [str(c).strip() for c in frame.columns]
        return frame.rename(columns={column.header: column.key for column in target.columns})
