"""
Splitter settings read from the environment (.env is loaded by the entry points)
"""
import os
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from app.rag.resplitter import chars_for_tokens


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class SplitterSettings(BaseModel):
    """Budgets are in estimated tokens (3 characters each), overlaps in characters"""

    legal_splitter_enabled: bool = True
    legal_max_tokens: int = Field(default=512, gt=0)
    legal_chunk_overlap: int = Field(default=50, ge=0)
    legal_enable_hierarchical: bool = True

    contract_max_tokens: int = Field(default=667, gt=0)
    contract_context_overlap: int = Field(default=200, ge=0)

    generic_max_tokens: int = Field(default=267, gt=0)
    generic_chunk_overlap: int = Field(default=80, ge=0)

    min_chunk_size: int = Field(default=50, ge=0)
    enable_quality_filter: bool = True

    @model_validator(mode="after")
    def check_overlaps(self) -> "SplitterSettings":
        for overlap, budget in (
            ("legal_chunk_overlap", "legal_max_tokens"),
            ("contract_context_overlap", "contract_max_tokens"),
        ):
            window = chars_for_tokens(getattr(self, budget))
            if getattr(self, overlap) >= window:
                raise ValueError(f"{overlap} must be smaller than the {window}-character window of {budget}")
        return self

    @classmethod
    def from_env(cls) -> "SplitterSettings":
        defaults = cls()
        return cls(
            legal_splitter_enabled=_env_bool("LEGAL_SPLITTER_ENABLED", defaults.legal_splitter_enabled),
            legal_max_tokens=os.getenv("LEGAL_MAX_TOKENS", defaults.legal_max_tokens),
            legal_chunk_overlap=os.getenv("LEGAL_CHUNK_OVERLAP", defaults.legal_chunk_overlap),
            legal_enable_hierarchical=_env_bool("LEGAL_ENABLE_HIERARCHICAL", defaults.legal_enable_hierarchical),
            contract_max_tokens=os.getenv("CONTRACT_MAX_TOKENS", defaults.contract_max_tokens),
            contract_context_overlap=os.getenv("CONTRACT_CONTEXT_OVERLAP", defaults.contract_context_overlap),
            generic_max_tokens=os.getenv("GENERIC_MAX_TOKENS", defaults.generic_max_tokens),
            generic_chunk_overlap=os.getenv("GENERIC_CHUNK_OVERLAP", defaults.generic_chunk_overlap),
            min_chunk_size=os.getenv("MIN_CHUNK_SIZE", defaults.min_chunk_size),
            enable_quality_filter=_env_bool("ENABLE_QUALITY_FILTER", defaults.enable_quality_filter),
        )


_settings: Optional[SplitterSettings] = None


def get_settings() -> SplitterSettings:
    global _settings
    if _settings is None:
        _settings = SplitterSettings.from_env()
    return _settings
