"""
Contract splitter

Recognises contract structure:
    第X章 ...   chapter heading
    第X条 ...   article
    第X款 ...   clause
    1. / 1、/ 1) ...  numbered items (kept inside the current clause)

Documents with fewer than three structural markers are not trusted to be
structured and are split by paragraph instead.
"""
from typing import Any, Dict, List, Optional

from loguru import logger

from app.models.segment import Segment
from app.rag.patterns import (
    Marker,
    count_contract_markers,
    match_contract_heading,
    split_paragraphs,
)
from app.rag.resplitter import RecursiveResplitter, estimate_tokens
from app.rag.splitter import DocumentSplitter


MIN_STRUCTURE_MARKERS = 3
MARKER_SCAN_CAP = 10


class _ClauseAccumulator:
    """Collects lines of the current clause and turns them into segments."""

    def __init__(self, resplitter: RecursiveResplitter, base: Dict[str, Any]):
        self.resplitter = resplitter
        self.base = base
        self.lines: List[str] = []
        self.chapter: Optional[Marker] = None
        self.clause_number: Optional[str] = None
        self.segments: List[Segment] = []

    @property
    def text(self) -> str:
        return "\n".join(self.lines).strip()

    def over_budget(self) -> bool:
        return estimate_tokens(self.text) > self.resplitter.max_tokens

    def append(self, line: str) -> None:
        self.lines.append(line)

    def flush(self) -> None:
        text = self.text
        self.lines = []
        if not text:
            return

        if self.resplitter.fits(text):
            self.segments.append(Segment(text=text, metadata=self._metadata()))
            return

        self.emit_fragments(text)

    def overflow(self) -> None:
        """Cuts the clause into fragments now instead of waiting for the next marker."""
        text = self.text
        self.lines = []
        if text:
            self.emit_fragments(text)

    def emit_fragments(self, text: str) -> None:
        fragments = self.resplitter.split_text(text)
        for i, fragment in enumerate(fragments):
            self.segments.append(Segment(
                text=fragment,
                metadata={
                    **self._metadata(),
                    "is_fragment": True,
                    "fragment_index": i,
                    "total_fragments": len(fragments),
                },
            ))

    def _metadata(self) -> Dict[str, Any]:
        metadata = dict(self.base)
        if self.clause_number is not None:
            metadata["clause_number"] = self.clause_number
        if self.chapter is not None:
            metadata["chapter"] = self.chapter.text
            metadata["chapter_title"] = self.chapter.heading
        return metadata


class ContractSplitter(DocumentSplitter):
    """
    Contract-aware splitter.

    Args:
        max_tokens: token budget per segment (667 tokens ~ 2000 characters)
        context_overlap: characters repeated across re-split fragments
    """

    name = "ContractSplitter"

    def __init__(self, max_tokens: int = 667, context_overlap: int = 200):
        self.resplitter = RecursiveResplitter(max_tokens=max_tokens, chunk_overlap=context_overlap)
        self.max_tokens = max_tokens
        self.context_overlap = context_overlap
        logger.info(f"Contract splitter ready - max_tokens: {max_tokens}, context_overlap: {context_overlap}")

    def split_text(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> List[Segment]:
        if not text or not text.strip():
            logger.warning("Empty contract, nothing to split")
            return []

        base = dict(metadata or {})
        logger.debug(f"Splitting contract, {len(text)} characters")

        split_type = "contract_paragraph"
        segments: List[Segment] = []
        if self.has_structure(text):
            try:
                segments = self.split_by_structure(text, base)
                split_type = "contract_structured"
            except Exception:
                logger.exception("Structured contract split failed, falling back to paragraphs")
                segments = []

        if not segments:
            segments = self.split_by_paragraph(text, base)
            split_type = "contract_paragraph"

        total = len(segments)
        segments = [
            segment.with_metadata(segment_index=i, total_segments=total, split_type=split_type)
            for i, segment in enumerate(segments)
        ]

        logger.info(f"Contract split into {total} segments ({split_type})")
        return segments

    @staticmethod
    def has_structure(text: str) -> bool:
        count = count_contract_markers(text, cap_per_type=MARKER_SCAN_CAP)
        logger.debug(f"Contract structure markers found: {count}")
        return count >= MIN_STRUCTURE_MARKERS

    def split_by_structure(self, text: str, base: Dict[str, Any]) -> List[Segment]:
        clause = _ClauseAccumulator(self.resplitter, base)

        for raw_line in text.split("\n"):
            line = raw_line.rstrip()
            marker = match_contract_heading(line)
            kind = marker.kind if marker else None

            if kind == "chapter":
                clause.flush()
                clause.chapter = marker
                clause.clause_number = None
                clause.append(line)
            elif kind in ("article", "clause"):
                clause.flush()
                clause.clause_number = marker.text
                clause.append(line)
            elif kind == "item":
                # Items stay with their clause unless it is already too long
                if clause.over_budget():
                    clause.flush()
                clause.append(line)
            else:
                clause.append(line)
                if clause.over_budget():
                    clause.overflow()

        clause.flush()
        return clause.segments

    def split_by_paragraph(self, text: str, base: Dict[str, Any]) -> List[Segment]:
        segments: List[Segment] = []
        current = ""

        def emit(block: str) -> None:
            if block.strip():
                segments.append(Segment(text=block, metadata=dict(base)))

        for paragraph in split_paragraphs(text):
            candidate = f"{current}\n\n{paragraph}" if current else paragraph
            if self.resplitter.fits(candidate):
                current = candidate
                continue

            emit(current)
            current = ""

            if self.resplitter.fits(paragraph):
                current = paragraph
            else:
                for chunk in self.resplitter.split_text(paragraph):
                    emit(chunk)

        emit(current)
        return segments
