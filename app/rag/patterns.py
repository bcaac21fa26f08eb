"""
Structural patterns for Chinese statutes and contracts.

Every matcher is a pure function over a single line: it returns a Marker
when the line opens with the structural marker, otherwise None.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Tuple


CJK_NUMERALS = "零〇一二三四五六七八九十百千"

# Statute hierarchy (numerals only, as printed in official texts)
BOOK_PATTERN = re.compile(rf"^\s*(第[{CJK_NUMERALS}]+编)\s*(.*)$")
CHAPTER_PATTERN = re.compile(rf"^\s*(第[{CJK_NUMERALS}]+章)\s*(.*)$")
SECTION_PATTERN = re.compile(rf"^\s*(第[{CJK_NUMERALS}]+节)\s*(.*)$")
ARTICLE_PATTERN = re.compile(rf"^\s*(第[{CJK_NUMERALS}]+条)\s*(.*)$")

# Zero-width split point in front of every article marker
ARTICLE_LOOKAHEAD = re.compile(rf"(?=第[{CJK_NUMERALS}]+条)")
# Leading article marker of a piece that may run over several lines
ARTICLE_PREFIX = re.compile(rf"\s*(第[{CJK_NUMERALS}]+条)")

# Contract vocabulary: arabic numbers are common in drafted agreements,
# and the marker must be followed by a separator or the end of the line.
CONTRACT_ARTICLE_PATTERN = re.compile(
    rf"^[ \t]*(第[{CJK_NUMERALS}0-9]+条)(?:[ \t:：]+(.*)|$)", re.MULTILINE
)
CONTRACT_CLAUSE_PATTERN = re.compile(
    rf"^[ \t]*(第[{CJK_NUMERALS}0-9]+款)(?:[ \t:：]+(.*)|$)", re.MULTILINE
)
CONTRACT_CHAPTER_PATTERN = re.compile(
    rf"^[ \t]*(第[{CJK_NUMERALS}0-9]+章)(?:[ \t:：]+(.*)|$)", re.MULTILINE
)
# "1. " needs a space so decimals such as "1.5倍" are not items
NUMBERED_ITEM_PATTERN = re.compile(r"^[ \t]*(\d+(?:\.(?=\s)|[、)）]))[ \t]*(.*)", re.MULTILINE)

PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


@dataclass(frozen=True)
class Marker:
    """A recognised structural marker, e.g. kind='chapter', text='第二章', title='总则'."""

    kind: str
    text: str
    title: str = ""

    @property
    def heading(self) -> str:
        return f"{self.text} {self.title}" if self.title else self.text


@dataclass(frozen=True)
class Separator:
    """One re-split level: where to cut and how to glue pieces back together."""

    name: str
    pattern: Pattern
    joiner: str

    def split(self, text: str) -> List[str]:
        return [piece for piece in self.pattern.split(text) if piece]


# Ordered from coarsest to finest. Punctuation levels cut after the mark
# so every piece keeps its own terminator.
RESPLIT_SEPARATORS: Tuple[Separator, ...] = (
    Separator("paragraph", PARAGRAPH_BREAK, "\n\n"),
    Separator("sentence", re.compile(r"(?<=[。！？!?；])"), ""),
    Separator("clause", re.compile(r"(?<=[，,;、])"), ""),
    Separator("whitespace", re.compile(r"(?<=\s)"), ""),
)


def _match(pattern: Pattern, kind: str, line: str) -> Optional[Marker]:
    if not line:
        return None
    match = pattern.match(line)
    if not match:
        return None
    title = (match.group(2) or "").strip()
    return Marker(kind=kind, text=match.group(1), title=title)


def match_book(line: str) -> Optional[Marker]:
    return _match(BOOK_PATTERN, "book", line)


def match_chapter(line: str) -> Optional[Marker]:
    return _match(CHAPTER_PATTERN, "chapter", line)


def match_section(line: str) -> Optional[Marker]:
    return _match(SECTION_PATTERN, "section", line)


def match_article(line: str) -> Optional[Marker]:
    return _match(ARTICLE_PATTERN, "article", line)


def match_legal_heading(line: str) -> Optional[Marker]:
    """
    Returns the first statute marker opening the line.

    Higher levels are tried first so a heading is never mistaken
    for an article.
    """
    for matcher in (match_book, match_chapter, match_section, match_article):
        marker = matcher(line)
        if marker:
            return marker
    return None


def match_contract_chapter(line: str) -> Optional[Marker]:
    return _match(CONTRACT_CHAPTER_PATTERN, "chapter", line)


def match_contract_article(line: str) -> Optional[Marker]:
    return _match(CONTRACT_ARTICLE_PATTERN, "article", line)


def match_contract_clause(line: str) -> Optional[Marker]:
    return _match(CONTRACT_CLAUSE_PATTERN, "clause", line)


def match_numbered_item(line: str) -> Optional[Marker]:
    return _match(NUMBERED_ITEM_PATTERN, "item", line)


def match_contract_heading(line: str) -> Optional[Marker]:
    for matcher in (
        match_contract_chapter,
        match_contract_article,
        match_contract_clause,
        match_numbered_item,
    ):
        marker = matcher(line)
        if marker:
            return marker
    return None


def extract_article_number(text: str) -> Optional[str]:
    match = ARTICLE_PREFIX.match(text or "")
    return match.group(1) if match else None


def split_before_articles(text: str) -> List[str]:
    """
    Cuts `text` in front of every article marker without consuming it.

    Only pieces that start with an article marker are returned; a
    preamble before the first marker is dropped.
    """
    pieces = []
    for piece in ARTICLE_LOOKAHEAD.split(text or ""):
        piece = piece.strip()
        if piece and extract_article_number(piece):
            pieces.append(piece)
    return pieces


def split_paragraphs(text: str) -> List[str]:
    return [p.strip() for p in PARAGRAPH_BREAK.split(text or "") if p.strip()]


def count_contract_markers(text: str, cap_per_type: int = 10) -> int:
    """Counts chapter, article and numbered-item markers, at most `cap_per_type` each."""
    total = 0
    for pattern in (
        CONTRACT_ARTICLE_PATTERN,
        CONTRACT_CHAPTER_PATTERN,
        NUMBERED_ITEM_PATTERN,
    ):
        found = 0
        for _ in pattern.finditer(text or ""):
            found += 1
            if found >= cap_per_type:
                break
        total += found
    return total


# ---------------------------------------------------------------------------
# Keyword tables (filename heuristics)
# ---------------------------------------------------------------------------

LEGAL_FILENAME_KEYWORDS: Tuple[str, ...] = (
    "法", "law", "法律", "法规", "条例", "规定",
    "民法", "刑法", "宪法", "行政法", "诉讼法",
    "规章", "办法", "细则",
)

CONTRACT_FILENAME_KEYWORDS: Tuple[str, ...] = (
    "合同", "contract", "协议", "agreement",
    "契约", "条款", "terms",
)

# Checked in order, first hit wins
LAW_CATEGORIES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("环境", "污染"), "环境保护"),
    (("劳动", "社保", "工伤"), "劳动社保"),
    (("民法", "合同", "物权", "侵权"), "民事法律"),
    (("刑法", "刑事"), "刑事法律"),
    (("行政", "处罚"), "行政法律"),
    (("诉讼",), "诉讼程序"),
    (("宪法",), "基本法律"),
)
DEFAULT_LAW_CATEGORY = "其他"

_FILE_EXTENSION = re.compile(r"\.(pdf|docx|txt|doc)$", re.IGNORECASE)


def law_name_from_filename(filename: str) -> str:
    return _FILE_EXTENSION.sub("", filename)


def categorize_law(law_name: Optional[str]) -> str:
    if not law_name:
        return DEFAULT_LAW_CATEGORY
    name = law_name.lower()
    for keywords, category in LAW_CATEGORIES:
        if any(keyword in name for keyword in keywords):
            return category
    return DEFAULT_LAW_CATEGORY


def is_legal_filename(filename: str) -> bool:
    name = (filename or "").lower()
    return any(keyword in name for keyword in LEGAL_FILENAME_KEYWORDS)


def is_contract_filename(filename: str) -> bool:
    name = (filename or "").lower()
    return any(keyword in name for keyword in CONTRACT_FILENAME_KEYWORDS)
