"""Shared interfaces for document access."""

from .storage import DocumentStore, FileSystemDocumentStore

__all__ = ["DocumentStore", "FileSystemDocumentStore"]
