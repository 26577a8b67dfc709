"""Error taxonomy for knowledge retrieval.

Fatal errors (``ConfigurationError``, ``SourceQueryError`` raised by the primary
query) propagate to the caller of ``RetrievalOrchestrator.search``. The others are
absorbed where they occur and only show up in the logs.
"""


class RetrievalError(Exception):
    """Base class for every error raised by the retrieval core."""


class ConfigurationError(RetrievalError):
    """Missing credentials, or the source registry could not be loaded."""


class SourceQueryError(RetrievalError):
    """A query against a single knowledge source failed."""

    def __init__(self, source_id: str, message: str):
        super().__init__(f"Query against source {source_id} failed: {message}")
        self.source_id = source_id


class MalformedRecordError(RetrievalError):
    """A record returned by a source lacks the expected structure."""


class LocatorExtractionError(RetrievalError):
    """A registry locator could not be resolved to a source identifier."""

    def __init__(self, locator: str):
        super().__init__(f"No 32-character hex source id found in locator {locator!r}")
        self.locator = locator
