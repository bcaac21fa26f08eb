import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.rag.patterns import (
    categorize_law,
    count_contract_markers,
    extract_article_number,
    is_contract_filename,
    is_legal_filename,
    law_name_from_filename,
    match_article,
    match_chapter,
    match_contract_article,
    match_contract_clause,
    match_legal_heading,
    match_numbered_item,
    split_before_articles,
    split_paragraphs,
)


def test_chapter_marker_and_title():
    marker = match_chapter("  第三章 合同的履行")

    assert marker.kind == "chapter"
    assert marker.text == "第三章"
    assert marker.title == "合同的履行"
    assert marker.heading == "第三章 合同的履行"


def test_article_marker_must_open_the_line():
    assert match_article("第十二条 当事人应当遵循诚信原则。").text == "第十二条"
    assert match_article("依照本法第十二条的规定") is None
    assert match_article("") is None


def test_heading_levels_are_distinguished():
    assert match_legal_heading("第一编 总则").kind == "book"
    assert match_legal_heading("第二章 自然人").kind == "chapter"
    assert match_legal_heading("第一节 监护").kind == "section"
    assert match_legal_heading("第一百条 内容").kind == "article"
    assert match_legal_heading("本法自公布之日起施行。") is None


def test_extract_article_number_handles_large_numerals():
    assert extract_article_number("第一千二百六十条 本法自2021年1月1日起施行。") == "第一千二百六十条"
    assert extract_article_number("没有条号") is None


def test_extract_article_number_from_multi_line_piece():
    assert extract_article_number("第一条 第一款内容。\n第二款内容。") == "第一条"
    assert extract_article_number("第二条 内容。\n第二章 附则") == "第二条"


def test_split_before_articles_keeps_multi_line_pieces():
    pieces = split_before_articles("第一条 第一款内容。\n第二款内容。\n第二条 内容。")

    assert pieces == ["第一条 第一款内容。\n第二款内容。", "第二条 内容。"]


def test_split_before_articles_drops_preamble():
    pieces = split_before_articles("前言部分。第一条 甲。第二条 乙。")

    assert pieces == ["第一条 甲。", "第二条 乙。"]


def test_split_before_articles_without_markers():
    assert split_before_articles("没有任何条文标记的文本。") == []


def test_contract_markers_accept_arabic_numbers():
    marker = match_contract_article("第3条：付款方式")

    assert marker.text == "第3条"
    assert marker.title == "付款方式"
    assert match_contract_clause("第二款 违约责任").text == "第二款"


def test_contract_marker_needs_separator():
    assert match_contract_article("第三条款另有约定的除外") is None
    assert match_contract_article("第三条").text == "第三条"


def test_numbered_items():
    assert match_numbered_item("1. 首付款").text == "1."
    assert match_numbered_item("2、尾款").text == "2、"
    assert match_numbered_item("3）验收").text == "3）"
    assert match_numbered_item("1.5倍的违约金") is None


def test_count_contract_markers_is_capped_per_type():
    text = "\n".join(f"第{i}条 内容" for i in range(1, 16))

    assert count_contract_markers(text) == 10
    assert count_contract_markers(text + "\n1. 项目\n2. 项目") == 12


def test_split_paragraphs():
    assert split_paragraphs("第一段。\n\n  \n第二段。\n") == ["第一段。", "第二段。"]


def test_law_category_lookup():
    assert categorize_law("中华人民共和国环境保护法") == "环境保护"
    assert categorize_law("中华人民共和国劳动合同法") == "劳动社保"
    assert categorize_law("中华人民共和国民法典") == "民事法律"
    assert categorize_law("中华人民共和国刑法") == "刑事法律"
    assert categorize_law("中华人民共和国行政处罚法") == "行政法律"
    assert categorize_law("中华人民共和国民事诉讼法") == "诉讼程序"
    assert categorize_law("中华人民共和国宪法") == "基本法律"
    assert categorize_law("公司章程") == "其他"
    assert categorize_law(None) == "其他"


def test_law_name_from_filename():
    assert law_name_from_filename("中华人民共和国民法典.pdf") == "中华人民共和国民法典"
    assert law_name_from_filename("劳动法.DOCX") == "劳动法"
    assert law_name_from_filename("notes.md") == "notes.md"


def test_filename_keywords():
    assert is_legal_filename("Labor_Law.pdf")
    assert is_legal_filename("安全生产条例.txt")
    assert is_contract_filename("Service Agreement.pdf")
    assert is_contract_filename("采购合同.docx")
    assert not is_legal_filename("meeting notes.txt")
    assert not is_contract_filename("meeting notes.txt")
