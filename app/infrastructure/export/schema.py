"""
Column schemas of the per-kind export tables.

Column order and header text are read by downstream spreadsheet
consumers and must not change.
"""

import re
from dataclasses import dataclass
from typing import Dict, Tuple

from ...core.enums import RecordKind

# Placeholder attribute for the column filled with the export time
SUBMISSION_DATE = "__submission_date__"


@dataclass(frozen=True)
class ExportColumn:
    header: str
    attribute: str
    width: int = 20

    @property
    def key(self) -> str:
        """Header text with whitespace removed, used as the row dict key."""
        return column_key(self.header)


def column_key(header: str) -> str:
    return re.sub(r"\s+", "", header)


OWNER_COLUMNS: Tuple[ExportColumn, ...] = (
    ExportColumn("Entry ID", "id", 10),
    ExportColumn("Submission Date", SUBMISSION_DATE, 20),
    ExportColumn("User ID", "user_id", 15),
    ExportColumn("Employee ID", "employee_id", 15),
    ExportColumn("User Name", "user_name", 20),
    ExportColumn("Department", "department", 15),
)

APPROVED_COLUMN = ExportColumn("Approved", "approved", 10)

BOOK_COLUMNS: Tuple[ExportColumn, ...] = OWNER_COLUMNS + (
    ExportColumn("Title", "title", 30),
    ExportColumn("Publisher", "publisher", 30),
    ExportColumn("Type", "type", 15),
    ExportColumn("Publication Date", "publication_date", 15),
    ExportColumn("Total Authors", "total_authors", 15),
    ExportColumn("SRMIST Authors", "srmist_authors", 15),
    ExportColumn("ISBN", "isbn", 15),
    ExportColumn("Proof File", "proof_file_path", 30),
    APPROVED_COLUMN,
)

PROJECT_COLUMNS: Tuple[ExportColumn, ...] = OWNER_COLUMNS + (
    ExportColumn("Title", "title", 30),
    ExportColumn("Funding Agency", "funding_agency", 30),
    ExportColumn("Role", "role", 10),
    ExportColumn("Principal Investigator", "principal_investigator", 25),
    ExportColumn("Co-Principal Investigator", "co_principal_investigator", 25),
    ExportColumn("Number of Co-PIs", "number_of_co_pis", 15),
    ExportColumn("Grant Date", "grant_date", 15),
    ExportColumn("Grant Amount", "grant_amount", 15),
    ExportColumn("Sanction Order File", "sanction_order_file_path", 30),
    ExportColumn("Amount Received", "amount_received", 15),
    ExportColumn("DD File", "dd_file_path", 30),
    ExportColumn("Date Received", "date_received", 15),
    APPROVED_COLUMN,
)

JOURNAL_COLUMNS: Tuple[ExportColumn, ...] = OWNER_COLUMNS + (
    ExportColumn("Paper Title", "paper_title", 30),
    ExportColumn("Journal Name", "journal_name", 30),
    ExportColumn("ISSN", "issn", 15),
    ExportColumn("Author Level", "author_level", 15),
    ExportColumn("Is Corresponding Author", "is_corresponding_author", 20),
    ExportColumn("1st Author Affiliation", "affiliation_1st_author", 20),
    ExportColumn("Corresponding Author Affiliation", "affiliation_corresponding_author", 25),
    ExportColumn("Is Same Author", "is_same_author", 15),
    ExportColumn("Corresponding Authors Count", "corresponding_authors_count", 25),
    ExportColumn("Authors Count", "authors_count", 15),
    ExportColumn("Citation Count", "citation_count", 15),
    ExportColumn("Is Interdisciplinary", "is_interdisciplinary", 20),
    ExportColumn("Interdisciplinary Type", "interdisciplinary_type", 25),
    ExportColumn("Indexed", "indexed", 10),
    ExportColumn("Published Date", "published_date", 15),
    ExportColumn("Proof File", "proof_file_path", 30),
    APPROVED_COLUMN,
)

EXPORT_SCHEMAS: Dict[RecordKind, Tuple[ExportColumn, ...]] = {
    RecordKind.BOOK: BOOK_COLUMNS,
    RecordKind.PROJECT: PROJECT_COLUMNS,
    RecordKind.JOURNAL: JOURNAL_COLUMNS,
}


def schema_for(kind: RecordKind) -> Tuple[ExportColumn, ...]:
    return EXPORT_SCHEMAS[RecordKind(kind)]


def headers_for(kind: RecordKind) -> Tuple[str, ...]:
    return tuple(column.header for column in schema_for(kind))
