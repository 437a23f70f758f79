from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Iterator

from src.models.section import SectionTree
from src.sid.generator import SidGenerator


@dataclass(slots=True)
class TOCBuilderConfig:
    """Configuration for parsing documents into hierarchical sections."""

    max_depth: int = 6
    include_body: bool = True


class TOCBuilder(ABC):
    """Abstract base class for turning document text into SID-annotated section trees."""

    def __init__(
        self,
        config: TOCBuilderConfig | None = None,
        *,
        generator: SidGenerator | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or TOCBuilderConfig()
        self.generator = generator or SidGenerator()
        self.logger = logger or logging.getLogger(__name__)

    @abstractmethod
    def build(self, text: str) -> SectionTree:
        """Parse a single document and return its section arena."""

    def build_many(self, texts: Iterable[str]) -> Iterator[SectionTree]:
        """Utility for parsing multiple documents."""

        for text in texts:
            yield self.build(text)


__all__ = ["TOCBuilder", "TOCBuilderConfig"]
