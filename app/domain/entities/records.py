from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Type

from app.core.enums import (
    Affiliation,
    BookType,
    IndexedType,
    ProjectRole,
    RecordKind,
)

from .base import IncentiveRecord


@dataclass(kw_only=True, repr=False)
class Book(IncentiveRecord):
    kind = RecordKind.BOOK
    proof_field = "proof_file_path"

    title: str
    publisher: str
    type: BookType
    publication_date: date
    total_authors: int
    srmist_authors: int = 0
    isbn: str
    proof_file_path: str


@dataclass(kw_only=True, repr=False)
class Project(IncentiveRecord):
    kind = RecordKind.PROJECT
    proof_field = "sanction_order_file_path"

    title: str
    funding_agency: str
    role: ProjectRole
    principal_investigator: str
    co_principal_investigator: Optional[str] = None
    number_of_co_pis: int = 0
    grant_date: date
    grant_amount: float
    sanction_order_file_path: str
    amount_received: Optional[float] = 0
    dd_file_path: Optional[str] = None
    date_received: Optional[date] = None


@dataclass(kw_only=True, repr=False)
class Journal(IncentiveRecord):
    kind = RecordKind.JOURNAL
    proof_field = "proof_file_path"

    paper_title: str
    journal_name: str
    issn: str
    author_level: str
    is_corresponding_author: bool
    affiliation_1st_author: Affiliation
    affiliation_corresponding_author: Affiliation
    is_same_author: bool
    corresponding_authors_count: int = 0
    authors_count: int = 0
    citation_count: int = 0
    is_interdisciplinary: bool = False
    interdisciplinary_type: Optional[str] = None
    indexed: IndexedType
    published_date: date
    proof_file_path: str


RECORD_TYPES: Dict[RecordKind, Type[IncentiveRecord]] = {
    RecordKind.BOOK: Book,
    RecordKind.PROJECT: Project,
    RecordKind.JOURNAL: Journal,
}


def record_type_for(kind: RecordKind) -> Type[IncentiveRecord]:
    return RECORD_TYPES[RecordKind(kind)]
