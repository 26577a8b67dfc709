"""Build the grounding bundle and answer prompt from knowledge and web results."""

from collections.abc import Sequence

from models.knowledge import SearchResult
from tools.web.contracts import WebSearchResult

MAX_KNOWLEDGE_BLOCKS = 10
MAX_WEB_BLOCKS = 10
MAX_BODY_CHARS = 200

NO_LINK_LABEL = "(no URL)"
NO_KNOWLEDGE_HITS = "(No matching notes were found in the knowledge base.)"
NO_WEB_HITS = "(No matching web results were found.)"


def truncate_body(text: str, limit: int = MAX_BODY_CHARS) -> str:
    """Cut ``text`` to ``limit`` characters, appending "..." when something was cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def render_knowledge_blocks(results: Sequence[SearchResult], limit: int = MAX_KNOWLEDGE_BLOCKS) -> str:
    if not results:
        return NO_KNOWLEDGE_HITS
    blocks = []
    for idx, result in enumerate(results[:limit], start=1):
        header = f"## Doc{idx}: {result.title}"
        if result.source_name:
            header += f" [{result.source_name}]"
        blocks.append(f"{header}\n{truncate_body(result.content)}\nURL: {result.link or NO_LINK_LABEL}")
    return "\n\n".join(blocks)


def render_web_blocks(results: Sequence[WebSearchResult], limit: int = MAX_WEB_BLOCKS) -> str:
    if not results:
        return NO_WEB_HITS
    blocks = []
    for idx, result in enumerate(results[:limit], start=1):
        blocks.append(
            f"## Web{idx}: {result.title}\n{truncate_body(result.snippet)}\nURL: {result.link or NO_LINK_LABEL}"
        )
    return "\n\n".join(blocks)


def build_grounding_bundle(
    knowledge_results: Sequence[SearchResult],
    web_results: Sequence[WebSearchResult],
) -> str:
    """Knowledge-base blocks first, then web blocks, each under its own heading."""
    return "\n".join(
        [
            "# Information from the knowledge base (takes precedence)",
            render_knowledge_blocks(knowledge_results),
            "",
            "# Information from the web (supplementary)",
            render_web_blocks(web_results),
        ]
    )


def build_answer_prompt(
    question: str,
    knowledge_results: Sequence[SearchResult],
    web_results: Sequence[WebSearchResult],
    answer_language: str = "Japanese",
) -> str:
    """
    Assemble the full prompt sent to the generation model.

    The knowledge base holds the user's own notes, so it is the primary source of
    truth. For recommendation requests the notes describe what the user already
    knows and likes; the model is told to infer preferences from them and look
    for new candidates in the web results instead of listing the notes back.
    """
    lines = [
        "You are the user's personal assistant.",
        f"Answer the user's question politely in {answer_language}, using the information below.",
        "",
        "## Priority of sources",
        "- The knowledge base contains notes written by the user. It takes precedence over everything else.",
        "- Use web information only to fill gaps the knowledge base does not cover.",
        "- If the two disagree, follow the knowledge base.",
        "",
        "## Recommendation requests",
        "When the user asks for recommendations (\"recommend me ...\", \"what is a good ...\"):",
        "1. Treat knowledge-base entries as the user's history and tastes, not as candidates.",
        "2. Summarize the user's preferences (highly rated items, common genres, recurring themes).",
        "3. Pick new candidates matching those preferences from the web information.",
        "4. Prefer candidates that do not already appear in the knowledge base; if you do suggest one "
        "that does, say that the user may have already experienced it.",
        "5. For each of 2-5 candidates give: the name, why it fits the user's tastes "
        "(which notes suggest it), and a short description.",
        "Never answer a recommendation request by merely listing the knowledge-base entries.",
        "",
        "---",
        "",
        "# User question",
        question,
        "",
        build_grounding_bundle(knowledge_results, web_results),
    ]
    return "\n".join(lines).strip()
