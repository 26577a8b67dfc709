"""Map raw Notion pages onto the canonical ``SearchResult``."""

from typing import Any, Iterable, Mapping

from models.knowledge import NO_TITLE_PLACEHOLDER, RawRecord, SearchResult, SourceDescriptor
from retrieval.errors import MalformedRecordError
from utils.logger import get_logger

logger = get_logger(__name__)


def _plain_text(fragments: Any) -> str:
    if not isinstance(fragments, list):
        return ""
    return "".join(
        str(fragment.get("plain_text") or "") for fragment in fragments if isinstance(fragment, Mapping)
    )


def _option_name(option: Any) -> str:
    if isinstance(option, Mapping):
        return str(option.get("name") or "")
    return ""


def property_text(prop: Any) -> str:
    """
    Text carried by one typed property, or "" for types that carry none.

    title / rich_text: joined plain text; select / status: the option label;
    multi_select: labels joined by a single space; url: the link itself.
    """
    if not isinstance(prop, Mapping):
        return ""
    prop_type = prop.get("type")
    if prop_type in ("title", "rich_text"):
        return _plain_text(prop.get(prop_type))
    if prop_type in ("select", "status"):
        return _option_name(prop.get(prop_type))
    if prop_type == "multi_select":
        options = prop.get("multi_select")
        if not isinstance(options, list):
            return ""
        return " ".join(name for name in (_option_name(o) for o in options) if name)
    if prop_type == "url":
        link = prop.get("url")
        return link if isinstance(link, str) else ""
    return ""


def extract_title(record: RawRecord) -> str:
    for prop in record.properties.values():
        if isinstance(prop, Mapping) and prop.get("type") == "title":
            return property_text(prop).strip() or NO_TITLE_PLACEHOLDER
    return NO_TITLE_PLACEHOLDER


def extract_content(record: RawRecord) -> str:
    texts = []
    for prop in record.properties.values():
        text = property_text(prop).strip()
        if text:
            texts.append(text)
    return "\n".join(texts)


def normalize_record(record: RawRecord, source: SourceDescriptor) -> SearchResult:
    """Build the SearchResult for one record of ``source``."""
    return SearchResult(
        source_id=source.source_id,
        record_id=record.record_id,
        title=extract_title(record),
        content=extract_content(record),
        link=record.url,
        source_name=source.display_name,
        usage_hint=source.usage_hint,
    )


def normalize_pages(pages: Iterable[Any], source: SourceDescriptor) -> list[SearchResult]:
    """
    Normalize raw pages, skipping the ones without a properties container.

    Order of ``pages`` is preserved.
    """
    results = []
    for page in pages:
        try:
            record = RawRecord.from_page(page)
        except MalformedRecordError as e:
            logger.debug(
                f"Skipping malformed record: {e}",
                extra={"extra_fields": {"source_id": source.source_id}},
            )
            continue
        results.append(normalize_record(record, source))
    return results
