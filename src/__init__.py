"""Section-addressed markdown editing package."""

from .models.section import Section, SectionTree

__all__ = ["Section", "SectionTree"]
