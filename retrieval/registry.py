"""Load the enabled knowledge sources from the registry database."""

import re
from typing import Any, Mapping

from api.base_source_client import KnowledgeSourceClient
from models.knowledge import RawRecord, SourceDescriptor
from retrieval.errors import ConfigurationError, LocatorExtractionError, MalformedRecordError
from retrieval.normalizer import property_text
from utils.logger import get_logger

logger = get_logger(__name__)

UNNAMED_SOURCE_PLACEHOLDER = "(unnamed source)"

_SOURCE_ID_RE = re.compile(r"[0-9a-fA-F]{32}")


def extract_source_id(locator: str) -> str:
    """
    Resolve a registry locator (usually a Notion database URL) to a source id.

    ``https://host/Name-4f1a...4b5c?v=1`` -> ``4f1a...4b5c``. The last path
    segment is used as-is when it already is a 32-character hex id, otherwise the
    part after its last ``-`` is tried.

    Raises:
        LocatorExtractionError: If neither yields a 32-character hex id
    """
    segment = (locator or "").strip().rsplit("/", 1)[-1]
    segment = segment.split("?", 1)[0].split("#", 1)[0]

    if _SOURCE_ID_RE.fullmatch(segment):
        return segment

    candidate = segment.rsplit("-", 1)[-1]
    if _SOURCE_ID_RE.fullmatch(candidate):
        return candidate

    raise LocatorExtractionError(locator)


class SourceRegistryLoader:
    """
    Turns registry records into ``SourceDescriptor`` objects.

    Nothing is cached: every call to ``load`` queries the registry again, so edits
    in Notion take effect on the next search.
    """

    def __init__(
        self,
        client: KnowledgeSourceClient,
        *,
        url_property: str = "URL",
        description_property: str = "Description",
        enabled_property: str = "Enabled",
    ):
        self.client = client
        self.url_property = url_property
        self.description_property = description_property
        self.enabled_property = enabled_property

    def _is_enabled(self, properties: Mapping[str, Any]) -> bool:
        prop = properties.get(self.enabled_property)
        return isinstance(prop, Mapping) and prop.get("checkbox") is True

    def _display_name(self, record: RawRecord) -> str:
        for prop in record.properties.values():
            if isinstance(prop, Mapping) and prop.get("type") == "title":
                return property_text(prop).strip() or UNNAMED_SOURCE_PLACEHOLDER
        return UNNAMED_SOURCE_PLACEHOLDER

    def parse_record(self, page: Any) -> SourceDescriptor | None:
        """
        Parse one registry record.

        Returns None for disabled records. Raises MalformedRecordError or
        LocatorExtractionError for records that cannot be used.
        """
        record = RawRecord.from_page(page)
        if not self._is_enabled(record.properties):
            return None

        locator = property_text(record.properties.get(self.url_property)).strip()
        source_id = extract_source_id(locator)

        return SourceDescriptor(
            source_id=source_id,
            display_name=self._display_name(record),
            usage_hint=property_text(record.properties.get(self.description_property)).strip(),
            enabled=True,
        )

    async def load(self) -> list[SourceDescriptor]:
        """
        Fetch and parse the enabled sources, in registry order.

        Raises:
            ConfigurationError: If the registry query itself fails
        """
        try:
            pages = await self.client.list_enabled_source_records()
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load knowledge source registry: {e}") from e

        sources: list[SourceDescriptor] = []
        for page in pages:
            try:
                source = self.parse_record(page)
            except LocatorExtractionError as e:
                logger.warning(
                    f"Skipping registry record: {e}",
                    extra={"extra_fields": {"locator": e.locator}},
                )
                continue
            except MalformedRecordError as e:
                logger.warning(f"Skipping malformed registry record: {e}")
                continue
            if source is not None:
                sources.append(source)

        logger.info(
            f"Loaded {len(sources)} knowledge source(s) from registry",
            extra={
                "extra_fields": {
                    "source_count": len(sources),
                    "record_count": len(pages),
                    "sources": [s.display_name for s in sources],
                }
            },
        )
        return sources
