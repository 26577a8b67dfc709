from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

from retrieval.errors import MalformedRecordError

Origin = Literal["notion"]

NO_TITLE_PLACEHOLDER = "(no title)"


@dataclass(frozen=True)
class SourceDescriptor:
    """One enabled knowledge source, parsed from a registry record."""

    source_id: str
    display_name: str
    usage_hint: str = ""
    enabled: bool = True


@dataclass(frozen=True)
class RawRecord:
    """
    A page as returned by a knowledge source.

    ``properties`` keeps the source's declaration order; the normalizer relies on it.
    """

    record_id: str
    properties: Mapping[str, Any]
    url: str | None = None

    @classmethod
    def from_page(cls, page: Any) -> "RawRecord":
        if not isinstance(page, Mapping):
            raise MalformedRecordError(f"Expected a page object, got {type(page).__name__}")
        properties = page.get("properties")
        if not isinstance(properties, Mapping):
            raise MalformedRecordError(f"Page {page.get('id', '?')} has no properties container")
        url = page.get("url")
        return cls(
            record_id=str(page.get("id") or ""),
            properties=properties,
            url=url if isinstance(url, str) and url else None,
        )


@dataclass(frozen=True)
class RecordPage:
    """One page of an enumeration query."""

    records: list[Any]
    next_cursor: str | None = None

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


@dataclass(frozen=True)
class SearchResult:
    source_id: str
    record_id: str
    title: str
    content: str
    link: str | None = None
    source_name: str | None = None
    usage_hint: str | None = None
    # keyword hits for fallback matches; None for exact title matches
    hit_count: int | None = None
    origin: Origin = "notion"

    def __post_init__(self):
        if not self.title:
            object.__setattr__(self, "title", NO_TITLE_PLACEHOLDER)

    def to_dict(self) -> dict[str, Any]:
        return {
            "origin": self.origin,
            "source_id": self.source_id,
            "record_id": self.record_id,
            "title": self.title,
            "content": self.content,
            "link": self.link,
            "source_name": self.source_name,
            "usage_hint": self.usage_hint,
            "hit_count": self.hit_count,
        }


@dataclass(frozen=True)
class QuerySession:
    """Everything derived from the raw query for one top-level search."""

    raw_query: str
    primary_query: str
    keywords: tuple[str, ...] = ()

    @property
    def is_ascii(self) -> bool:
        return self.raw_query.isascii()


@dataclass(frozen=True)
class SearchKnowledgeResponse:
    query: str
    results: list[SearchResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"query": self.query, "results": [r.to_dict() for r in self.results]}
