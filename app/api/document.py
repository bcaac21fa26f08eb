"""
Document processing for ClauseSplit
Picks a splitter, splits, filters and enriches the segments
"""
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from app.config import SplitterSettings, get_settings
from app.models.segment import ProcessingResult, Segment
from app.rag.factory import SplitterFactory
from app.rag.loader import load_file


SHORT_SEGMENT_TYPES = frozenset({"LAW", "REGULATION", "CASE"})
LEGAL_MIN_SEGMENT_CHARS = 10
CJK_PUNCTUATION = "。！？；，"

_factory: Optional[SplitterFactory] = None


def get_factory() -> SplitterFactory:
    global _factory
    if _factory is None:
        _factory = SplitterFactory(get_settings())
    return _factory


def keeps_short_segments(document_type: Optional[str]) -> bool:
    """Statutes and cases keep short segments, a one-line article is still an article"""
    return bool(document_type) and document_type.strip().upper() in SHORT_SEGMENT_TYPES


def clean_metadata(metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not metadata:
        return {}

    cleaned = {}
    for key, value in metadata.items():
        if value is None:
            logger.debug(f"Dropping empty metadata key: {key}")
            continue
        cleaned[key] = value
    return cleaned


def calculate_quality_score(text: str, document_type: Optional[str] = None) -> float:
    """
    Heuristic quality score in [0, 1].

    Penalises very short (non-legal) or very long text, text without CJK
    punctuation, and text that is mostly not CJK ideographs.
    """
    score = 1.0
    length = len(text)

    if not keeps_short_segments(document_type) and length < 100:
        score *= 0.7
    if length > 3000:
        score *= 0.8

    if not any(ch in CJK_PUNCTUATION for ch in text):
        score *= 0.6

    cjk_count = sum(1 for ch in text if "一" <= ch <= "龥")
    if cjk_count < length * 0.3:
        score *= 0.7

    return max(0.0, min(1.0, score))


def filter_and_enhance_segments(
    segments: List[Segment],
    document_type: Optional[str],
    splitter_type: str,
    settings: SplitterSettings,
) -> List[Segment]:
    min_size = LEGAL_MIN_SEGMENT_CHARS if keeps_short_segments(document_type) else settings.min_chunk_size
    kept = [segment for segment in segments if len(segment.text) >= min_size]

    timestamp = datetime.now().isoformat()
    enhanced = []
    for i, segment in enumerate(kept):
        updates = {
            "processing_timestamp": timestamp,
            "splitter_type": splitter_type,
            "segment_index": i,
            "total_segments": len(kept),
        }
        if settings.enable_quality_filter:
            updates["quality_score"] = calculate_quality_score(segment.text, document_type)
        enhanced.append(segment.with_metadata(**updates))

    return enhanced


def process_document(
    text: str,
    metadata: Optional[Dict[str, Any]] = None,
    document_type: Optional[str] = None,
    factory: Optional[SplitterFactory] = None,
) -> ProcessingResult:
    """
    Split one document into enriched segments.

    Args:
        text: Raw document text
        metadata: Base metadata; `original_filename` drives splitter selection
                  when no document type is given
        document_type: LAW, REGULATION, CONTRACT, CONTRACT_TEMPLATE, CASE, ...

    Returns:
        ProcessingResult, with success=False instead of an exception on failure
    """
    factory = factory or get_factory()
    started = time.monotonic()

    if not text or not text.strip():
        logger.warning("Document is empty, skipping")
        return ProcessingResult(success=False, message="empty document")

    def elapsed_ms() -> int:
        return int((time.monotonic() - started) * 1000)

    try:
        cleaned = clean_metadata(metadata)
        splitter = factory.select(document_type, cleaned.get("original_filename"))
        splitter_type = factory.splitter_type(splitter)
        logger.info(f"Processing document - type: {document_type}, splitter: {splitter_type}, {len(text)} characters")

        segments = splitter.split_text(text, cleaned)
        logger.debug(f"{len(segments)} raw segments")

        segments = filter_and_enhance_segments(segments, document_type, splitter_type, factory.settings)
        if not segments:
            logger.warning("No usable segments after filtering")
            return ProcessingResult(
                success=False,
                message="no usable segments",
                splitter_type=splitter_type,
                duration_ms=elapsed_ms(),
            )

        duration = elapsed_ms()
        logger.info(f"Document processed - {len(segments)} segments in {duration}ms")
        return ProcessingResult(
            success=True,
            message="document processed",
            segment_count=len(segments),
            splitter_type=splitter_type,
            duration_ms=duration,
            segments=segments,
        )

    except Exception as e:
        logger.exception(f"Document processing failed - type: {document_type}")
        return ProcessingResult(
            success=False,
            message=f"document processing failed: {e}",
            duration_ms=elapsed_ms(),
        )


def process_file(file_path: str, document_type: Optional[str] = None,
                 factory: Optional[SplitterFactory] = None) -> ProcessingResult:
    """Load a PDF or TXT file and split it"""
    document = load_file(Path(file_path))
    return process_document(
        document["text"],
        document["metadata"],
        document_type=document_type,
        factory=factory,
    )
