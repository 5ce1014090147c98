"""File-based document storage adapter."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class FileDocumentStore:
    """
    File-based document storage.

    Implements DocumentStore protocol. Paths are relative to ``base_dir``
    unless absolute; text is read and written as UTF-8 without newline
    translation, so CRLF documents round-trip unchanged.
    """

    def __init__(self, base_dir: Path | str | None = None):
        self.base_dir = Path(base_dir).expanduser() if base_dir else Path.cwd()

    def _resolve(self, path: Path | str) -> Path:
        path = Path(path).expanduser()
        return path if path.is_absolute() else self.base_dir / path

    def read(self, path: Path | str) -> str:
        """Read a document. Raises OSError if it cannot be read."""
        resolved = self._resolve(path)
        with resolved.open(encoding="utf-8", newline="") as f:
            return f.read()

    def write(self, path: Path | str, text: str) -> None:
        """Write/overwrite a document."""
        resolved = self._resolve(path)
        resolved.parent.mkdir(parents=True, exist_ok=True)
        with resolved.open("w", encoding="utf-8", newline="") as f:
            f.write(text)
        logger.debug(f"Wrote {len(text)} chars to {resolved}")

    def exists(self, path: Path | str) -> bool:
        """Check if a document exists."""
        return self._resolve(path).exists()
