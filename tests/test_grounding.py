import pytest

from context.grounding import (
    NO_KNOWLEDGE_HITS,
    NO_LINK_LABEL,
    NO_WEB_HITS,
    build_answer_prompt,
    build_grounding_bundle,
    render_knowledge_blocks,
    render_web_blocks,
    truncate_body,
)
from models.knowledge import SearchResult
from tools.web.contracts import WebSearchResult

pytestmark = pytest.mark.unit


def _doc(idx, **kwargs):
    fields = {"source_id": "s", "record_id": f"r{idx}", "title": f"Doc title {idx}", "content": "body"}
    fields.update(kwargs)
    return SearchResult(**fields)


def test_truncate_body_keeps_short_text():
    assert truncate_body("a" * 200) == "a" * 200


def test_truncate_body_cuts_and_marks_long_text():
    assert truncate_body("あ" * 250) == "あ" * 200 + "..."


def test_knowledge_block_layout():
    text = render_knowledge_blocks([_doc(1, source_name="漫画", link="https://notion.so/r1")])
    assert text == "## Doc1: Doc title 1 [漫画]\nbody\nURL: https://notion.so/r1"


def test_knowledge_block_without_link_or_source_name():
    text = render_knowledge_blocks([_doc(1)])
    assert text == f"## Doc1: Doc title 1\nbody\nURL: {NO_LINK_LABEL}"


def test_at_most_ten_blocks_of_each_kind():
    docs = [_doc(i) for i in range(12)]
    web = [WebSearchResult(title=f"w{i}", link=f"https://e/{i}") for i in range(12)]

    assert render_knowledge_blocks(docs).count("## Doc") == 10
    assert render_web_blocks(web).count("## Web") == 10


def test_empty_sections_use_placeholders():
    assert render_knowledge_blocks([]) == NO_KNOWLEDGE_HITS
    assert render_web_blocks([]) == NO_WEB_HITS


def test_bundle_puts_knowledge_before_web():
    bundle = build_grounding_bundle([_doc(1)], [WebSearchResult(title="Web A", link="https://e/a", snippet="s")])

    assert bundle.index("knowledge base") < bundle.index("## Doc1") < bundle.index("from the web") < bundle.index(
        "## Web1: Web A"
    )


def test_answer_prompt_contains_question_language_and_rules():
    prompt = build_answer_prompt("おすすめの漫画は？", [_doc(1)], [], answer_language="Japanese")

    assert "in Japanese" in prompt
    assert "# User question\nおすすめの漫画は？" in prompt
    assert "takes precedence" in prompt
    assert "Recommendation requests" in prompt
    assert prompt.endswith(NO_WEB_HITS)
