"""
Legal document splitter

Splits statutes into one segment per article ("第X条") while keeping the
book / chapter / section ("编" / "章" / "节") the article belongs to.

Splitting runs through an ordered ladder of strategies and stops at the
first one that yields segments:

    hierarchical  -> line walker tracking 编/章/节/条
    article       -> lookahead cut in front of every 条 marker
    paragraph     -> blank-line paragraphs, oversized ones re-split
    forced        -> re-split of the whole text

Articles over the token budget are re-split and tagged `part`/`total_parts`.
"""
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from app.models.segment import Segment
from app.rag.patterns import (
    Marker,
    categorize_law,
    extract_article_number,
    law_name_from_filename,
    match_legal_heading,
    split_before_articles,
    split_paragraphs,
)
from app.rag.resplitter import RecursiveResplitter, estimate_tokens
from app.rag.splitter import DocumentSplitter


UNKNOWN_ARTICLE = "未知条号"
HIERARCHY_SEPARATOR = " > "


@dataclass(frozen=True)
class ArticleUnit:
    """One article together with the headings active when it was flushed"""

    text: str
    article_number: str
    book: Optional[Marker] = None
    chapter: Optional[Marker] = None
    section: Optional[Marker] = None

    @property
    def hierarchy_path(self) -> str:
        ancestors = [m.text for m in (self.book, self.chapter, self.section) if m]
        return HIERARCHY_SEPARATOR.join(ancestors + [self.article_number])


@dataclass(frozen=True)
class HierarchyState:
    book: Optional[Marker] = None
    chapter: Optional[Marker] = None
    section: Optional[Marker] = None
    article_number: Optional[str] = None

    def article(self, lines: List[str]) -> Optional[ArticleUnit]:
        if self.article_number is None:
            return None
        return ArticleUnit(
            text="\n".join(lines).strip(),
            article_number=self.article_number,
            book=self.book,
            chapter=self.chapter,
            section=self.section,
        )


def advance(state: HierarchyState, line: str) -> Tuple[HierarchyState, bool]:
    """
    Feeds one line to the hierarchy state machine.

    Returns the next state and whether the line is a heading. A heading
    closes the open article; the caller builds that article from `state`,
    so it keeps the headings it started under. Body lines leave the state
    untouched and are collected by the caller.
    """
    marker = match_legal_heading(line.strip())
    if marker is None:
        return state, False

    closed_state = replace(state, article_number=None)

    if marker.kind == "book":
        return replace(closed_state, book=marker, chapter=None, section=None), True
    if marker.kind == "chapter":
        return replace(closed_state, chapter=marker, section=None), True
    if marker.kind == "section":
        return replace(closed_state, section=marker), True

    return replace(closed_state, article_number=marker.text), True


def walk_articles(lines: Iterable[str]) -> List[ArticleUnit]:
    state = HierarchyState()
    body: List[str] = []
    articles: List[ArticleUnit] = []

    def close() -> None:
        article = state.article(body)
        if article is not None and article.text:
            articles.append(article)

    for raw_line in lines:
        line = raw_line.strip()
        if not line:
            continue

        next_state, is_heading = advance(state, line)
        if is_heading:
            close()
            body = [line] if next_state.article_number is not None else []
        elif state.article_number is not None:
            body.append(line)
        state = next_state

    close()
    return articles


Strategy = Callable[[str, Dict[str, Any]], List[Segment]]


def first_success(strategies: Iterable[Tuple[str, Strategy]], text: str,
                  metadata: Dict[str, Any]) -> List[Segment]:
    """Runs strategies in order; an empty result or an error moves on to the next one."""
    for name, strategy in strategies:
        try:
            segments = strategy(text, metadata)
        except Exception:
            logger.exception(f"Split strategy '{name}' failed, trying the next one")
            continue

        if segments:
            logger.debug(f"Split strategy '{name}' produced {len(segments)} segments")
            return segments

        logger.warning(f"Split strategy '{name}' found no structure, falling back")

    return []


class LegalDocumentSplitter(DocumentSplitter):
    """
    Statute-aware splitter.

    Args:
        max_tokens: token budget per segment
        enable_hierarchical_parsing: track 编/章/节 context while walking lines
        chunk_overlap: characters repeated across re-split fragments
    """

    name = "LegalDocumentSplitter"

    def __init__(
        self,
        max_tokens: int = 512,
        enable_hierarchical_parsing: bool = True,
        chunk_overlap: int = 50,
    ):
        self.resplitter = RecursiveResplitter(max_tokens=max_tokens, chunk_overlap=chunk_overlap)
        self.max_tokens = max_tokens
        self.enable_hierarchical_parsing = enable_hierarchical_parsing
        self.chunk_overlap = chunk_overlap
        logger.info(
            f"Legal splitter ready - max_tokens: {max_tokens}, "
            f"hierarchical: {enable_hierarchical_parsing}, chunk_overlap: {chunk_overlap}"
        )

    def split_text(self, text: str, metadata: Optional[Dict[str, Any]] = None) -> List[Segment]:
        if not text or not text.strip():
            logger.warning("Empty legal document, nothing to split")
            return []

        base = self._base_metadata(metadata)
        segments = first_success(self._strategies(), text, base)
        logger.info(f"Legal document split into {len(segments)} segments")
        return segments

    def _strategies(self) -> List[Tuple[str, Strategy]]:
        ladder: List[Tuple[str, Strategy]] = []
        if self.enable_hierarchical_parsing:
            ladder.append(("hierarchical", self.split_with_hierarchy))
        ladder.extend([
            ("article", self.split_by_article),
            ("paragraph", self.split_by_paragraph),
            ("forced", self.force_split),
        ])
        return ladder

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def split_with_hierarchy(self, text: str, base: Dict[str, Any]) -> List[Segment]:
        articles = walk_articles(text.split("\n"))
        logger.debug(f"Hierarchy walk found {len(articles)} articles")
        segments = [self._article_segment(article, base) for article in articles]
        return self.handle_long_articles(segments)

    def split_by_article(self, text: str, base: Dict[str, Any]) -> List[Segment]:
        segments = []
        for piece in split_before_articles(text):
            number = extract_article_number(piece) or UNKNOWN_ARTICLE
            segments.append(Segment(
                text=piece,
                metadata={
                    **base,
                    "article_number": number,
                    "split_type": "article",
                    "hierarchy_path": number,
                },
            ))
        return self.handle_long_articles(segments)

    def split_by_paragraph(self, text: str, base: Dict[str, Any]) -> List[Segment]:
        paragraphs = split_paragraphs(text)
        # A single block of text is left to the forced rung
        if len(paragraphs) < 2:
            return []

        segments = []
        for paragraph in paragraphs:
            if self.resplitter.fits(paragraph):
                segments.append(Segment(
                    text=paragraph,
                    metadata={**base, "split_type": "fallback_paragraph"},
                ))
                continue

            for chunk in self.resplitter.split_text(paragraph):
                segments.append(Segment(
                    text=chunk,
                    metadata={**base, "split_type": "fallback_chunk"},
                ))
        return segments

    def force_split(self, text: str, base: Dict[str, Any]) -> List[Segment]:
        return [
            Segment(text=chunk, metadata={**base, "split_type": "fallback_forced"})
            for chunk in self.resplitter.split_text(text)
        ]

    # ------------------------------------------------------------------
    # Long articles
    # ------------------------------------------------------------------

    def handle_long_articles(self, segments: List[Segment]) -> List[Segment]:
        result = []
        for segment in segments:
            tokens = estimate_tokens(segment.text)
            if tokens <= self.max_tokens:
                result.append(segment)
                continue

            logger.debug(
                f"Article {segment.metadata.get('article_number')} too long "
                f"(~{tokens} tokens), re-splitting"
            )
            result.extend(self.split_long_article(segment))
        return result

    def split_long_article(self, segment: Segment) -> List[Segment]:
        chunks = self.resplitter.split_text(segment.text)
        return [
            Segment(
                text=chunk,
                metadata={
                    **segment.metadata,
                    "part": i + 1,
                    "total_parts": len(chunks),
                    "split_type": "article_part",
                },
            )
            for i, chunk in enumerate(chunks)
        ]

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    @staticmethod
    def _base_metadata(metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        base = dict(metadata or {})
        filename = base.get("original_filename")
        if isinstance(filename, str) and filename:
            law_name = law_name_from_filename(filename)
            base["law_name"] = law_name
            base["law_category"] = categorize_law(law_name)
        return base

    @staticmethod
    def _article_segment(article: ArticleUnit, base: Dict[str, Any]) -> Segment:
        metadata = {
            **base,
            "article_number": article.article_number,
            "split_type": "article_hierarchical",
            "hierarchy_path": article.hierarchy_path,
        }
        for level in ("book", "chapter", "section"):
            marker = getattr(article, level)
            if marker is not None:
                metadata[level] = marker.text
                metadata[f"{level}_title"] = marker.heading
        return Segment(text=article.text, metadata=metadata)
