import os
from dotenv import load_dotenv
from pathlib import Path
from enum import Enum

from retrieval.errors import ConfigurationError


class WebSearchProvider(Enum):
    """Supported web search providers."""
    SERPER = "serper"
    TAVILY = "tavily"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


class Config:
    """Configuration management for the application."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = Path(__file__).parent.parent / '.env'
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Notion
        self.NOTION_TOKEN = (os.getenv('NOTION_TOKEN') or '').strip()
        self.NOTION_CONFIG_DATABASE_ID = (os.getenv('NOTION_CONFIG_DATABASE_ID') or '').strip()
        self.NOTION_API_VERSION = os.getenv('NOTION_API_VERSION', '2022-06-28')
        self.NOTION_TITLE_PROPERTY = os.getenv('NOTION_TITLE_PROPERTY') or None
        self.NOTION_CONFIG_URL_PROPERTY = os.getenv('NOTION_CONFIG_URL_PROPERTY', 'URL')
        self.NOTION_CONFIG_DESCRIPTION_PROPERTY = os.getenv('NOTION_CONFIG_DESCRIPTION_PROPERTY', 'Description')
        self.NOTION_CONFIG_ENABLED_PROPERTY = os.getenv('NOTION_CONFIG_ENABLED_PROPERTY', 'Enabled')

        # Retrieval
        self.PRIMARY_RESULT_LIMIT = _env_int('PRIMARY_RESULT_LIMIT', 5)
        self.FALLBACK_PAGE_SIZE = _env_int('FALLBACK_PAGE_SIZE', 100)
        self.FALLBACK_MAX_PAGES = _env_int('FALLBACK_MAX_PAGES', 1)
        self.SOURCE_QUERY_TIMEOUT_S = _env_float('SOURCE_QUERY_TIMEOUT_S', 15.0)
        self.KEYWORD_LEXICON_PATH = os.getenv('KEYWORD_LEXICON_PATH') or None

        # Web search
        self.WEB_SEARCH_PROVIDER = os.getenv('WEB_SEARCH_PROVIDER', WebSearchProvider.SERPER.value).lower()
        self.SERPER_API_KEY = os.getenv('SERPER_API_KEY')
        self.SERPER_SEARCH_ENDPOINT = os.getenv('SERPER_SEARCH_ENDPOINT', 'https://google.serper.dev/search')
        self.TAVILY_API_KEY = os.getenv('TAVILY_API_KEY')
        self.WEB_SEARCH_TIMEOUT_S = _env_float('WEB_SEARCH_TIMEOUT_S', 15.0)

        # Generation
        self.LLM_API_KEY = os.getenv('LLM_API_KEY')
        self.LLM_API_BASE_URL = os.getenv('LLM_API_BASE_URL') or None
        self.LLM_MODEL = os.getenv('LLM_MODEL')
        self.ANSWER_LANGUAGE = os.getenv('ANSWER_LANGUAGE', 'Japanese')

    def require_notion(self) -> None:
        """
        Ensure the Notion credentials needed for retrieval are present.

        Raises:
            ConfigurationError: If NOTION_TOKEN or NOTION_CONFIG_DATABASE_ID is not set
        """
        if not self.NOTION_TOKEN:
            raise ConfigurationError(
                "NOTION_TOKEN is not set. Create an integration at "
                "https://www.notion.so/my-integrations and put its token in the .env file."
            )
        if not self.NOTION_CONFIG_DATABASE_ID:
            raise ConfigurationError(
                "NOTION_CONFIG_DATABASE_ID is not set. It must point to the Notion database "
                "that lists the knowledge sources to search."
            )
