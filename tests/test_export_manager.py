import asyncio
import logging
from datetime import datetime

import pytest
from openpyxl import load_workbook

from app.core.enums import ExportUpdateMode, RecordKind
from app.infrastructure.export import TabularExportManager, column_key, headers_for
from app.infrastructure.export.csv_codec import format_line, parse_line, split_lines


def csv_lines(manager, kind):
    return split_lines(manager.target(kind).csv_path.read_text(encoding="utf-8"))


class TestInitialize:
    async def test_creates_header_only_workbooks(self, manager):
        await manager.initialize()

        for kind in RecordKind:
            target = manager.target(kind)
            assert target.workbook_path.exists()
            assert not target.csv_path.exists()

            sheet = load_workbook(target.workbook_path)[kind.label]
            header = [cell.value for cell in sheet[1]]
            assert header == list(headers_for(kind))
            assert sheet.max_row == 1

    async def test_existing_workbook_is_left_alone(self, manager, make_book):
        await manager.append_entry(RecordKind.BOOK, make_book())
        before = manager.target(RecordKind.BOOK).workbook_path.read_bytes()

        await manager.initialize()

        assert manager.target(RecordKind.BOOK).workbook_path.read_bytes() == before

    async def test_column_widths_follow_schema(self, manager):
        await manager.initialize()
        sheet = load_workbook(manager.target(RecordKind.BOOK).workbook_path)["Books"]
        assert sheet.column_dimensions["A"].width == 10
        assert sheet.column_dimensions["G"].width == 30


class TestAppendEntry:
    async def test_scenario_a_single_book(self, manager, make_book):
        book = make_book(
            title="Intro to X",
            publisher="ACME",
            total_authors=2,
            srmist_authors=1,
            isbn="123-456",
        )

        assert await manager.append_entry(RecordKind.BOOK, book) is True

        lines = csv_lines(manager, RecordKind.BOOK)
        assert lines[0] == format_line(headers_for(RecordKind.BOOK))
        assert len(lines) == 2
        row = parse_line(lines[1], expected_fields=15)
        assert row[0] == "1"
        assert row[6:14] == [
            "Intro to X", "ACME", "Book", "2024-01-15", "2", "1", "123-456",
            "/uploads/books/7_1700000000000.pdf",
        ]
        assert row[14] == "No"

        sheet_rows = await manager.read_spreadsheet(RecordKind.BOOK)
        assert len(sheet_rows) == 1
        assert sheet_rows[0]["Title"] == "Intro to X"
        assert sheet_rows[0]["PublicationDate"] == "2024-01-15"
        assert sheet_rows[0]["TotalAuthors"] == "2"

    async def test_scenario_b_rows_in_call_order(self, manager, make_project):
        await manager.append_entry(RecordKind.PROJECT, make_project(id=1, title="First"))
        await manager.append_entry(RecordKind.PROJECT, make_project(id=2, title="Second"))

        rows = await manager.read_rows(RecordKind.PROJECT)
        assert [r["EntryID"] for r in rows] == ["1", "2"]
        assert [r["Title"] for r in rows] == ["First", "Second"]
        assert all(len(r) == 19 for r in rows)

    async def test_scenario_c_quotes_and_commas(self, manager, make_book):
        await manager.append_entry(RecordKind.BOOK, make_book(title='My, "Great" Book'))

        raw = csv_lines(manager, RecordKind.BOOK)[1]
        assert '"My, ""Great"" Book"' in raw

        rows = await manager.read_rows(RecordKind.BOOK)
        assert rows[0]["Title"] == 'My, "Great" Book'
        sheet_rows = await manager.read_spreadsheet(RecordKind.BOOK)
        assert sheet_rows[0]["Title"] == 'My, "Great" Book'

    async def test_scenario_d_concurrent_writes_lose_nothing(self, manager, make_journal):
        results = await asyncio.gather(
            *(manager.append_entry(RecordKind.JOURNAL, make_journal(id=i)) for i in range(1, 6))
        )

        assert results == [True] * 5
        rows = await manager.read_rows(RecordKind.JOURNAL)
        assert sorted(int(r["EntryID"]) for r in rows) == [1, 2, 3, 4, 5]

    async def test_append_monotonicity(self, manager, make_book):
        for i in range(1, 8):
            await manager.append_entry(RecordKind.BOOK, make_book(id=i))
        assert len(csv_lines(manager, RecordKind.BOOK)) == 8

    async def test_header_is_stable(self, manager, make_book):
        await manager.append_entry(RecordKind.BOOK, make_book(id=1))
        header = csv_lines(manager, RecordKind.BOOK)[0]
        await manager.initialize()
        await manager.append_entry(RecordKind.BOOK, make_book(id=2))

        assert csv_lines(manager, RecordKind.BOOK)[0] == header

    async def test_backup_holds_previous_contents(self, manager, make_book):
        target = manager.target(RecordKind.BOOK)
        await manager.append_entry(RecordKind.BOOK, make_book(id=1))
        assert not target.backup_path.exists()
        after_first = target.csv_path.read_bytes()

        await manager.append_entry(RecordKind.BOOK, make_book(id=2))

        assert target.backup_path.read_bytes() == after_first
        assert target.backup_path.name == "books.csv.bak"

    async def test_spreadsheet_matches_csv(self, manager, make_journal):
        awkward = [
            'On "Graphs", again',
            "Smith, J.",
            '"quoted"',
            "",
            "=1+1",
            "=HYPERLINK(\"http://example.com\")",
            "+91 44 2741 7000",
            "-5 citations",
            "@SUM(A1)",
        ]
        for i, text in enumerate(awkward, start=1):
            await manager.append_entry(
                RecordKind.JOURNAL,
                make_journal(id=i, paper_title=text, is_interdisciplinary=bool(text),
                             interdisciplinary_type=text or None),
            )
        await manager.append_entry(RecordKind.JOURNAL, make_journal(id=10, journal_name="Bad\x01Name\x1f"))

        csv_rows = await manager.read_rows(RecordKind.JOURNAL)
        sheet_rows = await manager.read_spreadsheet(RecordKind.JOURNAL)

        assert [r["PaperTitle"] for r in csv_rows[:len(awkward)]] == awkward
        assert csv_rows[-1]["JournalName"] == "BadName"
        assert len(sheet_rows) == len(csv_rows)
        for header in headers_for(RecordKind.JOURNAL):
            key = column_key(header)
            assert [r[key] for r in sheet_rows] == [r[key] for r in csv_rows], header

    async def test_leading_equals_is_stored_as_text(self, manager, make_book):
        await manager.append_entry(RecordKind.BOOK, make_book(title="=1+1"))

        sheet = load_workbook(manager.target(RecordKind.BOOK).workbook_path)["Books"]
        assert sheet["G2"].value == "=1+1"
        assert sheet["G2"].data_type == "s"

    async def test_optional_fields_are_blank(self, manager, make_project):
        await manager.append_entry(RecordKind.PROJECT, make_project())
        row = (await manager.read_rows(RecordKind.PROJECT))[0]

        assert row["Co-PrincipalInvestigator"] == ""
        assert row["DDFile"] == ""
        assert row["DateReceived"] == ""
        assert row["GrantAmount"] == "500000"

    async def test_journal_booleans_render_yes_no(self, manager, make_journal):
        await manager.append_entry(RecordKind.JOURNAL, make_journal(is_same_author=False))
        row = (await manager.read_rows(RecordKind.JOURNAL))[0]

        assert row["IsCorrespondingAuthor"] == "Yes"
        assert row["IsSameAuthor"] == "No"
        assert row["1stAuthorAffiliation"] == "SRM"

    async def test_submission_date_is_utc_iso(self, manager, make_book):
        await manager.append_entry(RecordKind.BOOK, make_book())
        stamp = (await manager.read_rows(RecordKind.BOOK))[0]["SubmissionDate"]

        parsed = datetime.fromisoformat(stamp)
        assert parsed.utcoffset().total_seconds() == 0


class TestFailures:
    async def test_workbook_failure_returns_false_but_keeps_csv(self, manager, make_book, monkeypatch, caplog):
        def broken(target, rows):
            raise OSError("disk full")

        monkeypatch.setattr(manager, "_write_workbook", broken)

        with caplog.at_level(logging.ERROR):
            assert await manager.append_entry(RecordKind.BOOK, make_book()) is False

        assert len(csv_lines(manager, RecordKind.BOOK)) == 2
        assert "Failed to export Books entry 1" in caplog.text

    async def test_unwritable_directory_returns_false(self, tmp_path, make_book):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        manager = TabularExportManager(blocker / "exports")

        assert await manager.append_entry(RecordKind.BOOK, make_book()) is False

    async def test_corrupt_row_is_skipped_in_workbook(self, manager, make_book, caplog):
        await manager.append_entry(RecordKind.BOOK, make_book(id=1))
        target = manager.target(RecordKind.BOOK)
        with open(target.csv_path, "a", encoding="utf-8") as f:
            f.write('99,"never closed\n')

        with caplog.at_level(logging.WARNING):
            assert await manager.append_entry(RecordKind.BOOK, make_book(id=2)) is True

        assert "Skipping corrupt row" in caplog.text
        sheet_rows = await manager.read_spreadsheet(RecordKind.BOOK)
        assert [r["EntryID"] for r in sheet_rows] == ["1", "2"]
        # the corrupt line stays in the source of truth
        assert any(line.startswith("99,") for line in csv_lines(manager, RecordKind.BOOK))

    async def test_control_characters_do_not_block_later_writes(self, manager, make_book):
        assert await manager.append_entry(RecordKind.BOOK, make_book(id=1, title="Bad\x01Title")) is True
        assert await manager.append_entry(RecordKind.BOOK, make_book(id=2, title="Clean")) is True

        sheet_rows = await manager.read_spreadsheet(RecordKind.BOOK)
        assert [(r["EntryID"], r["Title"]) for r in sheet_rows] == [("1", "BadTitle"), ("2", "Clean")]

    async def test_row_with_control_characters_is_skipped_in_workbook(self, manager, make_book, caplog):
        await manager.append_entry(RecordKind.BOOK, make_book(id=1))
        target = manager.target(RecordKind.BOOK)
        fields = parse_line(csv_lines(manager, RecordKind.BOOK)[1])
        fields[0], fields[6] = "99", "Bell\x07Title"
        with open(target.csv_path, "a", encoding="utf-8") as f:
            f.write(format_line(fields) + "\n")

        with caplog.at_level(logging.WARNING):
            assert await manager.append_entry(RecordKind.BOOK, make_book(id=2)) is True

        assert "Skipping row 99" in caplog.text
        sheet_rows = await manager.read_spreadsheet(RecordKind.BOOK)
        assert [r["EntryID"] for r in sheet_rows] == ["1", "2"]
        assert len(await manager.read_rows(RecordKind.BOOK)) == 3

    async def test_initialize_reports_unwritable_directory(self, tmp_path, caplog):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        manager = TabularExportManager(blocker / "exports")

        with caplog.at_level(logging.ERROR):
            assert await manager.initialize() is False

        assert "Could not initialize export tables" in caplog.text

    async def test_read_spreadsheet_without_workbook(self, manager):
        with pytest.raises(FileNotFoundError):
            await manager.read_spreadsheet(RecordKind.BOOK)


class TestRecordUpdate:
    async def test_append_mode_keeps_history(self, manager, make_book):
        await manager.append_entry(RecordKind.BOOK, make_book(title="Draft"))
        await manager.record_update(RecordKind.BOOK, make_book(title="Final"))

        rows = await manager.read_rows(RecordKind.BOOK)
        assert [r["Title"] for r in rows] == ["Draft", "Final"]

        latest = await manager.latest_rows(RecordKind.BOOK)
        assert [r["Title"] for r in latest] == ["Final"]

    async def test_upsert_mode_replaces_in_place(self, export_dir, make_book):
        manager = TabularExportManager(export_dir, update_mode=ExportUpdateMode.UPSERT)
        await manager.append_entry(RecordKind.BOOK, make_book(id=1, title="One"))
        await manager.append_entry(RecordKind.BOOK, make_book(id=2, title="Two"))

        await manager.record_update(RecordKind.BOOK, make_book(id=1, title="One, revised"))

        rows = await manager.read_rows(RecordKind.BOOK)
        assert [(r["EntryID"], r["Title"]) for r in rows] == [("1", "One, revised"), ("2", "Two")]

    async def test_upsert_of_unknown_id_appends(self, export_dir, make_book):
        manager = TabularExportManager(export_dir, update_mode="upsert")
        await manager.append_entry(RecordKind.BOOK, make_book(id=1))
        await manager.record_update(RecordKind.BOOK, make_book(id=5))

        rows = await manager.read_rows(RecordKind.BOOK)
        assert [r["EntryID"] for r in rows] == ["1", "5"]


class TestPreviewAndStatus:
    async def test_preview_latest_only(self, manager, make_book):
        await manager.append_entry(RecordKind.BOOK, make_book(id=1, title="Old"))
        await manager.append_entry(RecordKind.BOOK, make_book(id=2))
        await manager.record_update(RecordKind.BOOK, make_book(id=1, title="New"))

        preview = await manager.preview(RecordKind.BOOK, rows=10, latest_only=True)

        assert preview["total_rows"] == 2
        assert preview["history_rows"] == 3
        assert preview["sheet"] == "Books"
        assert [(r["EntryID"], r["Title"]) for r in preview["rows"]] == [("2", "Deep Learning"), ("1", "New")]

    async def test_regenerate_rebuilds_missing_workbook(self, manager, make_book):
        await manager.append_entry(RecordKind.BOOK, make_book())
        manager.target(RecordKind.BOOK).workbook_path.unlink()

        assert await manager.regenerate_spreadsheet(RecordKind.BOOK) is True
        assert len(await manager.read_spreadsheet(RecordKind.BOOK)) == 1

    async def test_status(self, manager, make_book):
        await manager.append_entry(RecordKind.BOOK, make_book())
        status = manager.status(RecordKind.BOOK)

        assert status["rows"] == 1
        assert status["csv_exists"] and status["workbook_exists"]
        assert manager.status(RecordKind.PROJECT)["csv_exists"] is False
