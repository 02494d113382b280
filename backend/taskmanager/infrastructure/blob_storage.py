"""Blob Locator — produces the location reference recorded on uploaded files.

Invariants:
    - Location is "<base>/tasks/<task_id>/<filename>"; bytes are not written here
"""


class MockBlobLocator:
    """Deterministic locator for a storage backend that is not part of this service."""

    def __init__(self, base_path: str = "/mock-storage"):
        self.base_path = base_path.rstrip("/")

    def locate(self, task_id: int, filename: str) -> str:
        return f"{self.base_path}/tasks/{task_id}/{filename}"
