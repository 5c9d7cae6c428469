import pytest

from app.core.exceptions import FileError, FileStorageError
from app.infrastructure.storage import IncomingFile, LocalFileStorage

from .helpers import PDF_BYTES


@pytest.fixture
def storage(tmp_path):
    return LocalFileStorage(
        tmp_path / "uploads",
        allowed_extensions=[".pdf"],
        allowed_content_types=["application/pdf"],
        max_file_size=1024,
    )


def test_save_upload_names_file_after_owner(storage, tmp_path):
    stored = storage.save_incoming(
        IncomingFile(filename="Proof.PDF", content_type="application/pdf", content=PDF_BYTES),
        subfolder="books",
        owner_id=7,
    )

    assert stored.filename.startswith("7_")
    assert stored.filename.endswith(".pdf")
    assert stored.public_path == f"/uploads/books/{stored.filename}"
    assert (tmp_path / "uploads" / "books" / stored.filename).read_bytes() == PDF_BYTES


def test_same_millisecond_uploads_do_not_collide(storage, monkeypatch):
    monkeypatch.setattr("app.infrastructure.storage.local_storage.time.time", lambda: 1700000000.0)
    first = storage.save_upload(PDF_BYTES, "a.pdf", "application/pdf", "books", 7)
    second = storage.save_upload(PDF_BYTES, "b.pdf", "application/pdf", "books", 7)

    assert first.filename == "7_1700000000000.pdf"
    assert second.filename == "7_1700000000000_1.pdf"


@pytest.mark.parametrize(
    "filename, content_type",
    [("notes.docx", "application/pdf"), ("proof.pdf", "image/png")],
)
def test_only_pdf_is_accepted(storage, filename, content_type):
    with pytest.raises(FileError, match="Only PDF files are allowed"):
        storage.save_upload(PDF_BYTES, filename, content_type, "books", 7)


def test_size_limit(storage):
    with pytest.raises(FileError, match="exceeds maximum"):
        storage.save_upload(b"x" * 2048, "big.pdf", "application/pdf", "books", 7)


def test_delete_public_path(storage):
    stored = storage.save_upload(PDF_BYTES, "a.pdf", "application/pdf", "journals", 3)

    assert storage.delete_public_path(stored.public_path) is True
    assert storage.delete_public_path(stored.public_path) is False
    assert storage.delete_public_path(None) is False
    assert storage.delete_public_path("/elsewhere/a.pdf") is False


def test_dot_segments_are_stripped_from_public_paths(storage):
    assert storage.resolve_public_path("/uploads/../../etc/passwd").name == "passwd"
    assert storage.delete_public_path("/uploads/../../etc/passwd") is False


def test_base_path_must_be_a_directory(tmp_path):
    target = tmp_path / "file"
    target.write_text("x")
    with pytest.raises((FileStorageError, FileExistsError)):
        LocalFileStorage(target)
