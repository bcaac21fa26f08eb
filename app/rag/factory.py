"""
Splitter factory

Maps a document type or a filename to a splitter:
    LAW, REGULATION              -> LegalDocumentSplitter
    CONTRACT, CONTRACT_TEMPLATE  -> ContractSplitter
    CASE, unknown, None          -> RecursiveWindowSplitter
"""
from typing import Optional

from loguru import logger

from app.config import SplitterSettings
from app.rag.contract_splitter import ContractSplitter
from app.rag.legal_splitter import LegalDocumentSplitter
from app.rag.patterns import is_contract_filename, is_legal_filename
from app.rag.splitter import DocumentSplitter, RecursiveWindowSplitter


LEGAL_DOCUMENT_TYPES = frozenset({"LAW", "REGULATION"})
CONTRACT_DOCUMENT_TYPES = frozenset({"CONTRACT", "CONTRACT_TEMPLATE"})
GENERIC_DOCUMENT_TYPES = frozenset({"CASE"})
KNOWN_DOCUMENT_TYPES = LEGAL_DOCUMENT_TYPES | CONTRACT_DOCUMENT_TYPES | GENERIC_DOCUMENT_TYPES


class SplitterFactory:
    """Builds each splitter once; the instances are safe to share between callers."""

    def __init__(self, settings: Optional[SplitterSettings] = None):
        self.settings = settings or SplitterSettings()

        self.recursive_splitter = RecursiveWindowSplitter(
            max_tokens=self.settings.generic_max_tokens,
            chunk_overlap=self.settings.generic_chunk_overlap,
        )
        self.contract_splitter = ContractSplitter(
            max_tokens=self.settings.contract_max_tokens,
            context_overlap=self.settings.contract_context_overlap,
        )

        if self.settings.legal_splitter_enabled:
            self.legal_splitter: DocumentSplitter = LegalDocumentSplitter(
                max_tokens=self.settings.legal_max_tokens,
                enable_hierarchical_parsing=self.settings.legal_enable_hierarchical,
                chunk_overlap=self.settings.legal_chunk_overlap,
            )
        else:
            logger.warning("Legal splitter disabled, legal documents use the recursive splitter")
            self.legal_splitter = self.recursive_splitter

    def get_splitter_by_document_type(self, document_type: Optional[str]) -> DocumentSplitter:
        doc_type = (document_type or "").strip().upper()

        if doc_type in LEGAL_DOCUMENT_TYPES:
            return self.legal_splitter
        if doc_type in CONTRACT_DOCUMENT_TYPES:
            return self.contract_splitter

        logger.debug(f"Document type {document_type!r} uses the recursive splitter")
        return self.recursive_splitter

    def get_splitter_by_filename(self, filename: Optional[str]) -> DocumentSplitter:
        if not filename:
            return self.recursive_splitter

        if is_legal_filename(filename):
            logger.debug(f"{filename} looks like a statute")
            return self.legal_splitter
        if is_contract_filename(filename):
            logger.debug(f"{filename} looks like a contract")
            return self.contract_splitter

        return self.recursive_splitter

    def select_splitter(self, document_type_or_filename: Optional[str]) -> DocumentSplitter:
        """Known document types are mapped directly, anything else is read as a filename."""
        value = (document_type_or_filename or "").strip()
        if value.upper() in KNOWN_DOCUMENT_TYPES:
            return self.get_splitter_by_document_type(value)
        return self.get_splitter_by_filename(value)

    def select(self, document_type: Optional[str] = None, filename: Optional[str] = None) -> DocumentSplitter:
        """The document type wins over the filename."""
        if document_type and document_type.strip():
            return self.get_splitter_by_document_type(document_type)
        if filename and filename.strip():
            return self.get_splitter_by_filename(filename)
        return self.recursive_splitter

    def splitter_type(self, splitter: DocumentSplitter) -> str:
        return splitter.name
