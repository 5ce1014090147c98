"""Adapters - I/O implementations of ports."""

from .file_document import FileDocumentStore

__all__ = [
    "FileDocumentStore",
]
