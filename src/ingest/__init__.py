"""Parsing utilities for building SID-annotated section trees."""

from .toc_builder import TOCBuilder, TOCBuilderConfig
from .markdown import MarkdownTOCBuilder, MarkdownTOCBuilderConfig, parse_sections

__all__ = [
    "TOCBuilder",
    "TOCBuilderConfig",
    "MarkdownTOCBuilder",
    "MarkdownTOCBuilderConfig",
    "parse_sections",
]
