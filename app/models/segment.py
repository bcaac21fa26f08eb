"""
Segment schemas shared by the splitters and the processing service
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Segment(BaseModel):
    """A bounded piece of a document plus the metadata needed to cite it"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "text": "第十二条 当事人订立合同，应当具有相应的民事权利能力和民事行为能力。",
                "metadata": {
                    "split_type": "article_hierarchical",
                    "article_number": "第十二条",
                    "chapter": "第二章",
                    "hierarchy_path": "第一编 > 第二章 > 第十二条",
                    "law_name": "中华人民共和国民法典",
                    "law_category": "民事法律",
                },
            }
        }
    )

    text: str
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("segment text must not be empty")
        return value

    def with_metadata(self, **updates: Any) -> "Segment":
        return Segment(text=self.text, metadata={**self.metadata, **updates})

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text, "metadata": dict(self.metadata)}


class ProcessingResult(BaseModel):
    """Outcome of splitting one document"""

    success: bool
    message: str
    segment_count: int = 0
    splitter_type: Optional[str] = None
    duration_ms: int = 0
    segments: List[Segment] = Field(default_factory=list)
