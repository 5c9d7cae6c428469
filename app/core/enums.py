from enum import Enum


class RecordKind(str, Enum):
    """Incentive-claim record kinds. Values double as URL segments and file stems."""
    BOOK = "books"
    PROJECT = "projects"
    JOURNAL = "journals"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class BookType(str, Enum):
    BOOK = "Book"
    BOOK_CHAPTER = "Book Chapter"


class ProjectRole(str, Enum):
    PI = "PI"
    CO_PI = "Co-PI"


class Affiliation(str, Enum):
    SRM = "SRM"
    OTHER = "Other"


class IndexedType(str, Enum):
    IF = "IF"
    SNIP = "SNIP"
    BOTH = "Both"


class UserRole(str, Enum):
    FACULTY = "faculty"
    STUDENT = "student"
    ADMIN = "admin"


class ExportUpdateMode(str, Enum):
    """How the export table reacts to a record update"""
    APPEND = "append"
    UPSERT = "upsert"
