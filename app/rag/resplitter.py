"""
Recursive re-splitting of oversized text.

Budgets are measured in estimated tokens. The estimate is biased towards
Chinese text, where one token covers roughly three characters.
"""
from dataclasses import dataclass
from typing import List, Sequence

from loguru import logger

from app.rag.patterns import RESPLIT_SEPARATORS, Separator


CHARS_PER_TOKEN = 3


def estimate_tokens(text: str) -> int:
    return len(text or "") // CHARS_PER_TOKEN


def chars_for_tokens(tokens: int) -> int:
    return tokens * CHARS_PER_TOKEN


@dataclass(frozen=True)
class RecursiveResplitter:
    """
    Splits text so that no piece exceeds `max_tokens`.

    Pieces are cut on the coarsest separator that occurs (paragraph,
    sentence, clause, whitespace), greedily merged back up to the budget,
    and anything still too long is handed to the next separator level.
    When no separator helps, a fixed-width character cut finishes the job.
    A new buffer starts with the last `chunk_overlap` characters of the
    previous piece.
    """

    max_tokens: int = 512
    chunk_overlap: int = 50
    separators: Sequence[Separator] = RESPLIT_SEPARATORS

    def __post_init__(self):
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be > 0, got {self.max_tokens}")
        if self.chunk_overlap < 0:
            raise ValueError(f"chunk_overlap must be >= 0, got {self.chunk_overlap}")
        if self.chunk_overlap >= self.cut_size:
            raise ValueError(
                f"chunk_overlap must be smaller than the {self.cut_size}-character window, "
                f"got {self.chunk_overlap}"
            )

    @property
    def cut_size(self) -> int:
        return chars_for_tokens(self.max_tokens)

    def fits(self, text: str) -> bool:
        return estimate_tokens(text) <= self.max_tokens

    def split_text(self, text: str) -> List[str]:
        pieces: List[str] = []
        self._split(text or "", 0, pieces)
        return pieces

    def _split(self, text: str, level: int, out: List[str]) -> None:
        if self.fits(text):
            piece = text.strip()
            if piece:
                out.append(piece)
            return

        if level >= len(self.separators):
            self._force_split(text, out)
            return

        separator = self.separators[level]
        parts = separator.split(text)
        if len(parts) <= 1:
            self._split(text, level + 1, out)
            return

        buffer = ""
        for part in parts:
            candidate = buffer + separator.joiner + part if buffer else part
            if self.fits(candidate):
                buffer = candidate
                continue

            if buffer:
                self._split(buffer, level + 1, out)
                buffer = self._overlap_seed(out)
                if buffer:
                    buffer += separator.joiner
            buffer += part

        if buffer:
            self._split(buffer, level + 1, out)

    def _overlap_seed(self, out: List[str]) -> str:
        if self.chunk_overlap <= 0 or not out:
            return ""
        return out[-1][-self.chunk_overlap:]

    def _force_split(self, text: str, out: List[str]) -> None:
        cut_size = self.cut_size
        step = cut_size - self.chunk_overlap
        logger.debug(f"Forced character split: {len(text)} chars, window {cut_size}, step {step}")

        for start in range(0, len(text), step):
            piece = text[start:start + cut_size].strip()
            if piece:
                out.append(piece)
            if start + cut_size >= len(text):
                break
