"""
Request and response schemas for incentive records.

Create/update schemas validate multipart form fields (camelCase names
as sent by the client); read schemas render record entities.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Optional, Type

from pydantic import Field

from app.core.enums import Affiliation, BookType, IndexedType, ProjectRole, RecordKind

from .base import CamelModel, FormModel


class RecordRead(CamelModel):
    id: int
    user_id: int
    employee_id: str
    user_name: str
    department: str
    approved: bool = False
    created_at: datetime
    updated_at: datetime


# Books

class BookCreate(FormModel):
    title: str = Field(min_length=1)
    publisher: str = Field(min_length=1)
    type: BookType
    publication_date: date
    total_authors: int = Field(ge=1)
    srmist_authors: int = Field(default=0, ge=0)
    isbn: str = Field(min_length=1)


class BookUpdate(FormModel):
    title: Optional[str] = Field(default=None, min_length=1)
    publisher: Optional[str] = Field(default=None, min_length=1)
    type: Optional[BookType] = None
    publication_date: Optional[date] = None
    total_authors: Optional[int] = Field(default=None, ge=1)
    srmist_authors: Optional[int] = Field(default=None, ge=0)
    isbn: Optional[str] = Field(default=None, min_length=1)


class BookRead(RecordRead):
    title: str
    publisher: str
    type: BookType
    publication_date: date
    total_authors: int
    srmist_authors: int
    isbn: str
    proof_file_path: str


# Projects

class ProjectCreate(FormModel):
    title: str = Field(min_length=1)
    funding_agency: str = Field(min_length=1)
    role: ProjectRole
    principal_investigator: str = Field(min_length=1)
    co_principal_investigator: Optional[str] = None
    number_of_co_pis: int = Field(default=0, ge=0, alias="numberOfCoPIs")
    grant_date: date
    grant_amount: float = Field(ge=0)
    amount_received: Optional[float] = Field(default=0, ge=0)
    date_received: Optional[date] = None


class ProjectUpdate(FormModel):
    title: Optional[str] = Field(default=None, min_length=1)
    funding_agency: Optional[str] = Field(default=None, min_length=1)
    role: Optional[ProjectRole] = None
    principal_investigator: Optional[str] = Field(default=None, min_length=1)
    co_principal_investigator: Optional[str] = None
    number_of_co_pis: Optional[int] = Field(default=None, ge=0, alias="numberOfCoPIs")
    grant_date: Optional[date] = None
    grant_amount: Optional[float] = Field(default=None, ge=0)
    amount_received: Optional[float] = Field(default=None, ge=0)
    date_received: Optional[date] = None


class ProjectRead(RecordRead):
    title: str
    funding_agency: str
    role: ProjectRole
    principal_investigator: str
    co_principal_investigator: Optional[str] = None
    number_of_co_pis: int = Field(alias="numberOfCoPIs")
    grant_date: date
    grant_amount: float
    sanction_order_file_path: str
    amount_received: Optional[float] = None
    dd_file_path: Optional[str] = None
    date_received: Optional[date] = None


# Journals

class JournalCreate(FormModel):
    paper_title: str = Field(min_length=1)
    journal_name: str = Field(min_length=1)
    issn: str = Field(min_length=1)
    author_level: str = Field(min_length=1)
    is_corresponding_author: bool
    affiliation_1st_author: Affiliation = Field(alias="affiliation1stAuthor")
    affiliation_corresponding_author: Affiliation
    is_same_author: bool
    corresponding_authors_count: int = Field(default=0, ge=0)
    authors_count: int = Field(default=0, ge=0)
    citation_count: int = Field(default=0, ge=0)
    is_interdisciplinary: bool = False
    interdisciplinary_type: Optional[str] = None
    indexed: IndexedType
    published_date: date


class JournalUpdate(FormModel):
    paper_title: Optional[str] = Field(default=None, min_length=1)
    journal_name: Optional[str] = Field(default=None, min_length=1)
    issn: Optional[str] = Field(default=None, min_length=1)
    author_level: Optional[str] = Field(default=None, min_length=1)
    is_corresponding_author: Optional[bool] = None
    affiliation_1st_author: Optional[Affiliation] = Field(default=None, alias="affiliation1stAuthor")
    affiliation_corresponding_author: Optional[Affiliation] = None
    is_same_author: Optional[bool] = None
    corresponding_authors_count: Optional[int] = Field(default=None, ge=0)
    authors_count: Optional[int] = Field(default=None, ge=0)
    citation_count: Optional[int] = Field(default=None, ge=0)
    is_interdisciplinary: Optional[bool] = None
    interdisciplinary_type: Optional[str] = None
    indexed: Optional[IndexedType] = None
    published_date: Optional[date] = None


class JournalRead(RecordRead):
    paper_title: str
    journal_name: str
    issn: str
    author_level: str
    is_corresponding_author: bool
    affiliation_1st_author: Affiliation = Field(alias="affiliation1stAuthor")
    affiliation_corresponding_author: Affiliation
    is_same_author: bool
    corresponding_authors_count: int
    authors_count: int
    citation_count: int
    is_interdisciplinary: bool
    interdisciplinary_type: Optional[str] = None
    indexed: IndexedType
    published_date: date
    proof_file_path: str


@dataclass(frozen=True)
class UploadField:
    """Multipart file field and the record attribute receiving its public path."""

    form_name: str
    attribute: str
    required: bool = True


@dataclass(frozen=True)
class RecordSchemas:
    create: Type[FormModel]
    update: Type[FormModel]
    read: Type[RecordRead]
    uploads: tuple


RECORD_SCHEMAS: Dict[RecordKind, RecordSchemas] = {
    RecordKind.BOOK: RecordSchemas(
        create=BookCreate,
        update=BookUpdate,
        read=BookRead,
        uploads=(UploadField("proofFile", "proof_file_path"),),
    ),
    RecordKind.PROJECT: RecordSchemas(
        create=ProjectCreate,
        update=ProjectUpdate,
        read=ProjectRead,
        uploads=(
            UploadField("sanctionOrder", "sanction_order_file_path"),
            UploadField("ddCopy", "dd_file_path", required=False),
        ),
    ),
    RecordKind.JOURNAL: RecordSchemas(
        create=JournalCreate,
        update=JournalUpdate,
        read=JournalRead,
        uploads=(UploadField("proofFile", "proof_file_path"),),
    ),
}


def schemas_for(kind: RecordKind) -> RecordSchemas:
    return RECORD_SCHEMAS[RecordKind(kind)]
