from .manager import ExportTarget, TabularExportManager
from .schema import EXPORT_SCHEMAS, ExportColumn, column_key, headers_for, schema_for

__all__ = [
    "EXPORT_SCHEMAS",
    "ExportColumn",
    "ExportTarget",
    "TabularExportManager",
    "column_key",
    "headers_for",
    "schema_for",
]
