"""Upload Enforcement — payload checks that run before any ownership lookup.

Invariants:
    - Empty payload is rejected
    - MAX_FILE_SIZE_BYTES (2 MiB) is inclusive: exactly 2 MiB is accepted
"""

from taskmanager.core.errors import InvalidArgumentError


MAX_FILE_SIZE_BYTES: int = 2 * 1024 * 1024


def check_upload_payload(size: int, max_bytes: int = MAX_FILE_SIZE_BYTES) -> None:
    if size <= 0:
        raise InvalidArgumentError("File is empty.", field="file")
    if size > max_bytes:
        raise InvalidArgumentError(
            "File exceeds maximum size of 2MB.", field="file",
        )
