import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.api.document import (
    calculate_quality_score,
    clean_metadata,
    process_document,
    process_file,
)
from app.config import SplitterSettings
from app.rag.factory import SplitterFactory


LAW_TEXT = (
    "第一章 总则\n"
    "第一条 为了保护劳动者的合法权益，调整劳动关系，制定本法。\n"
    "第二条 在中华人民共和国境内的企业、个体经济组织和与之形成劳动关系的劳动者，适用本法。\n"
    "第三条 劳动者享有平等就业和选择职业的权利。"
)


@pytest.fixture
def factory():
    return SplitterFactory(SplitterSettings())


def test_legal_document_is_split_and_enriched(factory):
    result = process_document(LAW_TEXT, {"original_filename": "劳动法.pdf"}, "LAW", factory=factory)

    assert result.success
    assert result.splitter_type == "LegalDocumentSplitter"
    assert result.segment_count == 3
    for i, segment in enumerate(result.segments):
        metadata = segment.metadata
        assert metadata["segment_index"] == i
        assert metadata["total_segments"] == 3
        assert metadata["splitter_type"] == "LegalDocumentSplitter"
        assert 0.0 <= metadata["quality_score"] <= 1.0
        assert "processing_timestamp" in metadata
        assert metadata["law_category"] == "劳动社保"


def test_filename_selects_splitter_without_document_type(factory):
    text = "第一条 标的物。\n第二条 价款。\n第三条 交付期限。"

    result = process_document(text, {"original_filename": "采购合同.txt"}, factory=factory)

    assert result.splitter_type == "ContractSplitter"


def test_short_segments_are_dropped_for_generic_documents(factory):
    result = process_document("太短了。", {"original_filename": "memo.txt"}, factory=factory)

    assert not result.success
    assert result.segment_count == 0
    assert result.splitter_type == "RecursiveSplitter"


def test_empty_document(factory):
    result = process_document("   ", {}, "LAW", factory=factory)

    assert not result.success
    assert result.message == "empty document"


def test_quality_score_can_be_disabled():
    factory = SplitterFactory(SplitterSettings(enable_quality_filter=False))

    result = process_document(LAW_TEXT, None, "LAW", factory=factory)

    assert result.success
    assert all("quality_score" not in s.metadata for s in result.segments)


def test_errors_are_reported_not_raised(factory, monkeypatch):
    def boom(text, metadata=None):
        raise RuntimeError("splitter exploded")

    monkeypatch.setattr(factory.legal_splitter, "split_text", boom)

    result = process_document(LAW_TEXT, None, "LAW", factory=factory)

    assert not result.success
    assert "splitter exploded" in result.message


def test_clean_metadata_drops_none_values():
    assert clean_metadata({"a": 1, "b": None, "c": ""}) == {"a": 1, "c": ""}
    assert clean_metadata(None) == {}


def test_quality_score():
    assert calculate_quality_score("abc") == pytest.approx(0.7 * 0.6 * 0.7)
    assert calculate_quality_score("合同条款内容，" * 20) == pytest.approx(1.0)
    # Short legal text is not penalised for its length
    assert calculate_quality_score("第一条 本法适用于全国。", "LAW") == pytest.approx(1.0)


def test_process_file(tmp_path, factory):
    path = tmp_path / "劳动法.txt"
    path.write_text(LAW_TEXT, encoding="utf-8")

    result = process_file(str(path), factory=factory)

    assert result.success
    assert result.splitter_type == "LegalDocumentSplitter"
    assert result.segments[0].metadata["original_filename"] == "劳动法.txt"
