# Roles that may read and edit every user's records
ADMIN_ROLES = ("admin",)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

CSV_DELIMITER = ","
CSV_QUOTE = '"'
CSV_LINE_TERMINATOR = "\n"

YES = "Yes"
NO = "No"

LOG_EXCLUDE_PATHS = [
    "/health",
    "/uploads",
]
