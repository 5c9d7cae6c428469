import asyncio

from app.core.enums import RecordKind
from app.infrastructure.export import TabularExportManager
from app.interfaces.cli.commands.exports import Command as ExportsCommand
from app.interfaces.cli.main import CLIManager, main


def test_commands_are_discovered():
    commands = CLIManager().available_commands
    assert {"exports", "runserver"} <= set(commands)
    assert "base" not in commands


def test_exports_init_and_status(tmp_path, capsys):
    directory = tmp_path / "exports"

    assert ExportsCommand().run(["--init", "--status", "--directory", str(directory)]) == 0

    for kind in RecordKind:
        assert (directory / f"{kind.value}.xlsx").exists()
    out = capsys.readouterr().out
    assert "no CSV yet" in out
    assert "workbook present" in out


def test_exports_init_into_unwritable_directory_fails(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x")

    assert ExportsCommand().run(["--init", "--directory", str(blocker / "exports")]) == 1


async def test_exports_rebuild_from_csv(tmp_path, make_book):
    directory = tmp_path / "exports"
    manager = TabularExportManager(directory)
    await manager.append_entry(RecordKind.BOOK, make_book())
    manager.target(RecordKind.BOOK).workbook_path.unlink()

    # asyncio.run needs its own thread when a loop is already running
    code = await asyncio.to_thread(ExportsCommand().run, ["--rebuild", "books", "--directory", str(directory)])

    assert code == 0
    assert len(await manager.read_spreadsheet(RecordKind.BOOK)) == 1


def test_unknown_command_exits_non_zero(capsys):
    assert main(["nope"]) == 1
    assert "Unknown command: nope" in capsys.readouterr().out
