"""Config loading and document-level edit orchestration."""
