"""
Shared fixtures: isolated export/upload directories, record factories
and an API client wired to them.
"""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from app.core.config import ExportSettings, Settings, StorageSettings
from app.core.enums import Affiliation, BookType, IndexedType, ProjectRole
from app.domain.entities.records import Book, Journal, Project
from app.infrastructure.export import TabularExportManager

from .helpers import register

OWNER = {
    "user_id": 7,
    "employee_id": "EMP007",
    "user_name": "Asha Raman",
    "department": "CSE",
}


@pytest.fixture
def export_dir(tmp_path):
    return tmp_path / "excel_data"


@pytest.fixture
def manager(export_dir):
    return TabularExportManager(export_dir)


@pytest.fixture
def make_book():
    def _make(id=1, **overrides):
        fields = {
            **OWNER,
            "title": "Deep Learning",
            "publisher": "Springer",
            "type": BookType.BOOK,
            "publication_date": date(2024, 1, 15),
            "total_authors": 3,
            "srmist_authors": 1,
            "isbn": "978-3-16-148410-0",
            "proof_file_path": "/uploads/books/7_1700000000000.pdf",
        }
        fields.update(overrides)
        return Book(id=id, **fields)

    return _make


@pytest.fixture
def make_project():
    def _make(id=1, **overrides):
        fields = {
            **OWNER,
            "title": "Smart Grid",
            "funding_agency": "DST",
            "role": ProjectRole.PI,
            "principal_investigator": "Asha Raman",
            "grant_date": date(2023, 6, 1),
            "grant_amount": 500000.0,
            "sanction_order_file_path": "/uploads/projects/7_1700000000001.pdf",
        }
        fields.update(overrides)
        return Project(id=id, **fields)

    return _make


@pytest.fixture
def make_journal():
    def _make(id=1, **overrides):
        fields = {
            **OWNER,
            "paper_title": "Graph Networks",
            "journal_name": "IEEE Access",
            "issn": "2169-3536",
            "author_level": "First",
            "is_corresponding_author": True,
            "affiliation_1st_author": Affiliation.SRM,
            "affiliation_corresponding_author": Affiliation.SRM,
            "is_same_author": True,
            "corresponding_authors_count": 1,
            "authors_count": 4,
            "citation_count": 2,
            "indexed": IndexedType.BOTH,
            "published_date": date(2024, 3, 10),
            "proof_file_path": "/uploads/journals/7_1700000000002.pdf",
        }
        fields.update(overrides)
        return Journal(id=id, **fields)

    return _make


@pytest.fixture
def settings(tmp_path):
    return Settings(
        export=ExportSettings(directory=str(tmp_path / "excel_data")),
        storage=StorageSettings(upload_dir=str(tmp_path / "uploads")),
    )


@pytest.fixture
def client(settings):
    from app.main import create_application

    app = create_application(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def faculty_headers(client):
    headers, _ = register(client)
    return headers


@pytest.fixture
def admin_headers(client):
    headers, _ = register(client, email="admin@example.edu", role="admin", name="Admin", employee_id="ADM001")
    return headers
