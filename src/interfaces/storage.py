from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path


class DocumentStore(ABC):
    """Read and write whole markdown documents by caller-supplied path."""

    @abstractmethod
    def read_document(self, path: str) -> str:
        """Return the full text of ``path``."""

    @abstractmethod
    def write_document(self, path: str, text: str) -> None:
        """Replace the full text of ``path``."""


class FileSystemDocumentStore(DocumentStore):
    """UTF-8 documents on local disk, confined to ``base_dir``."""

    def __init__(self, base_dir: Path | str) -> None:
        self.base_dir = Path(base_dir).resolve()

    def resolve(self, path: str) -> Path:
        candidate = (self.base_dir / path).resolve()
        if candidate != self.base_dir and self.base_dir not in candidate.parents:
            raise ValueError(f"Path {path!r} escapes document root {self.base_dir}")
        return candidate

    def read_document(self, path: str) -> str:
        resolved = self.resolve(path)
        if not resolved.is_file():
            raise FileNotFoundError(f"Document not found: {resolved}")
        return resolved.read_text(encoding="utf-8")

    def write_document(self, path: str, text: str) -> None:
        resolved = self.resolve(path)
        resolved.parent.mkdir(parents=True, exist_ok=True)
        resolved.write_text(text, encoding="utf-8")


__all__ = ["DocumentStore", "FileSystemDocumentStore"]
