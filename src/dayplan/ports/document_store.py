"""Document storage interface."""

from pathlib import Path
from typing import Protocol


class DocumentStore(Protocol):
    """Interface for reading and writing plan documents."""

    def read(self, path: Path | str) -> str:
        """Read a document's full text."""
        ...

    def write(self, path: Path | str, text: str) -> None:
        """Write/overwrite a document."""
        ...

    def exists(self, path: Path | str) -> bool:
        """Check if a document exists."""
        ...
