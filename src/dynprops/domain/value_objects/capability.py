"""Named optional features of a storage backend."""

from enum import StrEnum


class Capability(StrEnum):
    """Backend capabilities probed at setup time."""

    GENERATED_COLUMNS = "generated_columns"
    FTS_EXTENSION = "fts_extension"
    JSON1_EXTENSION = "json1_extension"
    JSON_FUNCTIONS = "json_functions"
    FULLTEXT_SEARCH = "fulltext_search"
    CASE_SENSITIVE_LIKE = "case_sensitive_like"
