from datetime import date

import pytest

from app.core.enums import BookType, RecordKind
from app.core.exceptions import ConflictError
from app.domain.entities.records import Book
from app.infrastructure.db import DatabaseManager, InMemoryRecordRepository, InMemoryUserRepository


def book_fields(user_id=7, **overrides):
    fields = {
        "user_id": user_id,
        "employee_id": "EMP007",
        "user_name": "Asha Raman",
        "department": "CSE",
        "title": "Deep Learning",
        "publisher": "Springer",
        "type": BookType.BOOK,
        "publication_date": date(2024, 1, 15),
        "total_authors": 3,
        "isbn": "978-3-16-148410-0",
        "proof_file_path": "/uploads/books/7_1.pdf",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def books():
    return InMemoryRecordRepository(RecordKind.BOOK)


async def test_ids_are_sequential_per_kind(books):
    first = await books.create(book_fields())
    second = await books.create(book_fields())
    projects = InMemoryRecordRepository(RecordKind.PROJECT)

    assert (first.id, second.id) == (1, 2)
    assert isinstance(first, Book)
    assert first.approved is False
    assert await projects.count() == 0


async def test_create_rejects_unknown_fields(books):
    with pytest.raises(ValueError, match="Unknown Books fields"):
        await books.create(book_fields(colour="blue"))


async def test_find_filters_by_owner_newest_first(books):
    await books.create(book_fields(user_id=1, title="A"))
    await books.create(book_fields(user_id=2, title="B"))
    await books.create(book_fields(user_id=1, title="C"))

    mine = await books.find(user_id=1)
    assert [b.title for b in mine] == ["C", "A"]
    assert len(await books.find()) == 3


async def test_update_merges_and_protects_identity(books):
    created = await books.create(book_fields())

    updated = await books.update(created.id, {"title": "Revised", "user_id": 99, "id": 50})

    assert updated.title == "Revised"
    assert updated.user_id == 7
    assert updated.id == created.id
    assert updated.created_at == created.created_at
    assert updated.updated_at >= created.updated_at
    assert (await books.find_by_id(created.id)).title == "Revised"


async def test_update_and_delete_missing(books):
    assert await books.update(42, {"title": "x"}) is None
    assert await books.delete(42) is False


async def test_delete_never_reuses_ids(books):
    first = await books.create(book_fields())
    assert await books.delete(first.id) is True
    second = await books.create(book_fields())
    assert second.id == 2


async def test_user_emails_are_unique_case_insensitively():
    users = InMemoryUserRepository()
    data = {"name": "Asha", "email": "Asha@Example.edu", "employee_id": "E1", "department": "CSE"}
    user = await users.create(data)

    assert user.email == "asha@example.edu"
    assert await users.get_by_email("ASHA@example.edu") is user
    with pytest.raises(ConflictError):
        await users.create({**data, "email": "asha@example.edu"})


async def test_database_manager_health_and_reset():
    db = DatabaseManager()
    await db.connect()
    await db.records(RecordKind.BOOK).create(book_fields())

    assert db.is_connected
    assert await db.health_check() == {"books": 1, "projects": 0, "journals": 0}

    db.reset()
    assert await db.health_check() == {"books": 0, "projects": 0, "journals": 0}
