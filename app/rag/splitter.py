from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from langchain_text_splitters import RecursiveCharacterTextSplitter
from loguru import logger

from app.models.segment import Segment
from app.rag.resplitter import chars_for_tokens


class DocumentSplitter(ABC):
    """
    Turns a document dict {"text": ..., "metadata": ...} into segments.

    Subclasses implement `split_text`; it must never raise and must
    return an empty list for blank input.
    """

    name = "DocumentSplitter"

    @abstractmethod
    def split_text(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> List[Segment]:
        ...

    def split(self, document: Dict[str, Any]) -> List[Segment]:
        return self.split_text(document.get("text") or "", document.get("metadata") or {})

    def split_documents(self, documents: List[Dict]) -> List[Dict]:
        chunked_docs = []

        for doc in documents:
            chunked_docs.extend(segment.to_dict() for segment in self.split(doc))

        return chunked_docs


class RecursiveWindowSplitter(DocumentSplitter):
    """
    Structure-agnostic splitter for untyped content: fixed-size windows
    with overlap, cut at the most natural boundary available.
    """

    name = "RecursiveSplitter"

    def __init__(
        self,
        max_tokens: int = 267,  # ~800 characters
        chunk_overlap: int = 80  # characters
    ):
        if max_tokens <= 0:
            raise ValueError(f"max_tokens must be > 0, got {max_tokens}")
        if chunk_overlap < 0:
            raise ValueError(f"chunk_overlap must be >= 0, got {chunk_overlap}")

        self.max_tokens = max_tokens
        self.chunk_overlap = min(chunk_overlap, chars_for_tokens(max_tokens))
        self.splitter = RecursiveCharacterTextSplitter(
            chunk_size=chars_for_tokens(max_tokens),
            chunk_overlap=self.chunk_overlap,
            separators=[
                "\n\n",       # Paragraph breaks
                "\n",         # Line breaks
                "。",         # CJK sentence end
                "；",
                ". ",         # Sentence end with space
                "，",
                " ",          # Word boundary
                ""
            ],
            keep_separator="end",
            length_function=len,
            is_separator_regex=False
        )

    def split_text(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> List[Segment]:
        if not text or not text.strip():
            return []

        chunks = [chunk for chunk in self.splitter.split_text(text) if chunk.strip()]
        segments = [
            Segment(
                text=chunk,
                metadata={
                    **(metadata or {}),
                    "split_type": "recursive_window",
                    "chunk_id": idx
                }
            )
            for idx, chunk in enumerate(chunks)
        ]

        logger.debug(f"Recursive window split produced {len(segments)} segments")
        return segments
