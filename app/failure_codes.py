"""Shared failure code constants for upload error handling."""

UNSUPPORTED_FILE_TYPE = "unsupported_file_type"
PARSE_ERROR = "parse_error"
EMPTY_DATASET = "empty_dataset"

# Failures caused by the file itself rather than its contents.
CLIENT_INPUT_FAILURES = [
    UNSUPPORTED_FILE_TYPE,
    PARSE_ERROR,
]

# Files that parsed cleanly but carried nothing to analyse.
EMPTY_INPUT_FAILURES = [
    EMPTY_DATASET,
]
