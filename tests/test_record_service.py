import pytest

from app.core.enums import RecordKind, UserRole
from app.core.exceptions import FileError, ForbiddenError, NotFoundError, ValidationException
from app.domain.entities.user_entity import User
from app.infrastructure.db import DatabaseManager
from app.infrastructure.storage import IncomingFile, LocalFileStorage
from app.schemas.base import validate_payload
from app.schemas.records import BookCreate, BookUpdate, ProjectCreate
from app.services.record_service import RecordService

from .helpers import PDF_BYTES

BOOK_FORM = {
    "title": "Intro to X",
    "publisher": "ACME",
    "type": "Book",
    "publicationDate": "2024-01-15",
    "totalAuthors": "2",
    "srmistAuthors": "1",
    "isbn": "123-456",
}


def pdf(name="proof.pdf"):
    return IncomingFile(filename=name, content_type="application/pdf", content=PDF_BYTES)


@pytest.fixture
def db():
    return DatabaseManager()


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(
        tmp_path / "uploads",
        allowed_extensions=[".pdf"],
        allowed_content_types=["application/pdf"],
        max_file_size=4 * 1024 * 1024,
    )


@pytest.fixture
def faculty():
    return User(id=1, name="Asha Raman", email="asha@example.edu", employee_id="EMP001", department="CSE")


@pytest.fixture
def other_faculty():
    return User(id=2, name="Ravi K", email="ravi@example.edu", employee_id="EMP002", department="ECE")


@pytest.fixture
def admin():
    return User(
        id=3, name="Admin", email="admin@example.edu", employee_id="ADM", department="Office",
        role=UserRole.ADMIN,
    )


def service_for(kind, db, manager, storage):
    return RecordService(kind, db.records(kind), manager, storage)


@pytest.fixture
def books(db, manager, storage):
    return service_for(RecordKind.BOOK, db, manager, storage)


async def test_create_copies_owner_and_exports(books, faculty, manager):
    record = await books.create(faculty, validate_payload(BookCreate, BOOK_FORM), {"proofFile": pdf()})

    assert record.id == 1
    assert (record.user_id, record.employee_id, record.user_name, record.department) == (
        1, "EMP001", "Asha Raman", "CSE",
    )
    assert record.proof_file_path.startswith("/uploads/books/1_")
    rows = await manager.read_rows(RecordKind.BOOK)
    assert rows[0]["Title"] == "Intro to X"
    assert rows[0]["ProofFile"] == record.proof_file_path


async def test_missing_proof_is_rejected_before_export(books, faculty, manager):
    with pytest.raises(ValidationException) as exc_info:
        await books.create(faculty, validate_payload(BookCreate, BOOK_FORM), {})

    assert exc_info.value.status_code == 400
    assert await books.repository.count() == 0
    assert not manager.target(RecordKind.BOOK).csv_path.exists()


async def test_rejected_upload_stores_nothing(books, faculty, storage):
    bad = IncomingFile(filename="proof.png", content_type="image/png", content=b"png")
    with pytest.raises(FileError):
        await books.create(faculty, validate_payload(BookCreate, BOOK_FORM), {"proofFile": bad})

    assert await books.repository.count() == 0
    assert not any(storage.base_path.rglob("*.png"))


async def test_export_failure_does_not_fail_create(books, faculty, manager, monkeypatch):
    async def failing(kind, record):
        return False

    monkeypatch.setattr(manager, "append_entry", failing)

    record = await books.create(faculty, validate_payload(BookCreate, BOOK_FORM), {"proofFile": pdf()})
    assert await books.repository.find_by_id(record.id) is not None


async def test_project_requires_sanction_order_and_accepts_dd_copy(db, manager, storage, faculty):
    projects = service_for(RecordKind.PROJECT, db, manager, storage)
    payload = validate_payload(ProjectCreate, {
        "title": "Smart Grid",
        "fundingAgency": "DST",
        "role": "PI",
        "principalInvestigator": "Asha Raman",
        "numberOfCoPIs": "2",
        "grantDate": "2023-06-01",
        "grantAmount": "500000",
        "dateReceived": "",
    })

    with pytest.raises(ValidationException):
        await projects.create(faculty, payload, {"proofFile": pdf()})

    record = await projects.create(faculty, payload, {"sanctionOrder": pdf(), "ddCopy": pdf("dd.pdf")})
    assert record.number_of_co_pis == 2
    assert record.date_received is None
    assert record.sanction_order_file_path != record.dd_file_path
    assert record.dd_file_path.startswith("/uploads/projects/")


async def test_list_scopes_by_role(books, faculty, other_faculty, admin):
    form = validate_payload(BookCreate, BOOK_FORM)
    await books.create(faculty, form, {"proofFile": pdf()})
    await books.create(other_faculty, form, {"proofFile": pdf()})

    assert [r.user_id for r in await books.list(faculty)] == [1]
    assert len(await books.list(admin)) == 2


async def test_get_checks_ownership(books, faculty, other_faculty, admin):
    record = await books.create(faculty, validate_payload(BookCreate, BOOK_FORM), {"proofFile": pdf()})

    assert (await books.get(admin, record.id)).id == record.id
    with pytest.raises(ForbiddenError):
        await books.get(other_faculty, record.id)
    with pytest.raises(NotFoundError):
        await books.get(faculty, 999)


async def test_update_replaces_proof_and_appends_export_row(books, faculty, storage, manager):
    record = await books.create(faculty, validate_payload(BookCreate, BOOK_FORM), {"proofFile": pdf()})
    old_file = storage.resolve_public_path(record.proof_file_path)

    updated = await books.update(
        faculty,
        record.id,
        validate_payload(BookUpdate, {"title": "Intro to Y", "isbn": ""}),
        {"proofFile": pdf("new.pdf")},
    )

    assert updated.title == "Intro to Y"
    assert updated.isbn == "123-456"
    assert updated.proof_file_path != record.proof_file_path
    assert not old_file.exists()
    assert storage.resolve_public_path(updated.proof_file_path).exists()

    rows = await manager.read_rows(RecordKind.BOOK)
    assert [r["Title"] for r in rows] == ["Intro to X", "Intro to Y"]


async def test_delete_removes_files_but_not_export_rows(books, faculty, storage, manager):
    record = await books.create(faculty, validate_payload(BookCreate, BOOK_FORM), {"proofFile": pdf()})
    proof = storage.resolve_public_path(record.proof_file_path)

    await books.delete(faculty, record.id)

    assert not proof.exists()
    assert await books.repository.find_by_id(record.id) is None
    assert len(await manager.read_rows(RecordKind.BOOK)) == 1


def test_invalid_form_values():
    with pytest.raises(ValidationException) as exc_info:
        validate_payload(BookCreate, {**BOOK_FORM, "type": "Magazine", "totalAuthors": "0"})

    fields = {e["field"] for e in exc_info.value.details["errors"]}
    assert fields == {"type", "totalAuthors"}
