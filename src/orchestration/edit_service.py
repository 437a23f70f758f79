from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from src.editing.executor import EditIntentExecutor
from src.ingest.markdown import MarkdownTOCBuilder
from src.interfaces.storage import DocumentStore, FileSystemDocumentStore
from src.models.configs import EditorConfig
from src.models.intent import EditRequest
from src.models.results import EditResponse
from src.settings import Settings, get_settings


class DocumentEditService:
    """Read a document from a store, run an intent batch on it and persist the result."""

    def __init__(
        self,
        store: DocumentStore,
        config: EditorConfig | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.config = config or EditorConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.builder = MarkdownTOCBuilder(self.config.parser_config(), logger=self.logger)
        self.executor = EditIntentExecutor(self.builder, self.config.locator_config(), logger=self.logger)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "DocumentEditService":
        settings = settings or get_settings()
        return cls(FileSystemDocumentStore(settings.base_dir), settings.to_editor_config())

    def read_toc(self, path: str) -> List[Dict[str, Any]]:
        tree = self.builder.build(self.store.read_document(path))
        return [entry.to_dict() for entry in tree.to_toc()]

    def apply(self, request: EditRequest | Mapping[str, Any]) -> EditResponse:
        if not isinstance(request, EditRequest):
            request = EditRequest.model_validate(request)

        text = self.store.read_document(request.target_file)
        response = self.executor.execute(text, request.intents)

        if self._should_write(response, text):
            self.store.write_document(request.target_file, response.text)
            self.logger.info("Wrote %d characters to %s", len(response.text), request.target_file)
        else:
            self.logger.info("Left %s unchanged", request.target_file)
        return response

    def _should_write(self, response: EditResponse, original: str) -> bool:
        if response.text == original:
            return False
        if not any(not applied.validated_only for applied in response.applied_intents):
            return False
        return response.success or self.config.write_partial_results


__all__ = ["DocumentEditService"]
