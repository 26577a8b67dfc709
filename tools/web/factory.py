"""Factory for creating the web search client from environment configuration."""

from config.config import Config, WebSearchProvider
from retrieval.errors import ConfigurationError
from utils.logger import get_logger

from .contracts import WebSearchClient
from .serper_client import SerperSearchClient
from .tavily_client import TavilySearchClient

logger = get_logger(__name__)


def create_web_search_client_from_env(config: Config | None = None) -> WebSearchClient:
    """
    Create the web search client selected by WEB_SEARCH_PROVIDER.

    Environment variables:
        WEB_SEARCH_PROVIDER: "serper" (default) or "tavily"
        SERPER_API_KEY / SERPER_SEARCH_ENDPOINT: Serper credentials and endpoint
        TAVILY_API_KEY: Tavily credentials

    Raises:
        ConfigurationError: If the provider is unknown or its API key is not set
    """
    config = config or Config()
    provider = config.WEB_SEARCH_PROVIDER

    if provider == WebSearchProvider.SERPER.value:
        if not config.SERPER_API_KEY:
            raise ConfigurationError("SERPER_API_KEY is not set. Put it in the .env file.")
        logger.info("Using Serper for web search")
        return SerperSearchClient(
            api_key=config.SERPER_API_KEY,
            endpoint=config.SERPER_SEARCH_ENDPOINT,
            timeout_s=config.WEB_SEARCH_TIMEOUT_S,
        )

    if provider == WebSearchProvider.TAVILY.value:
        if not config.TAVILY_API_KEY:
            raise ConfigurationError("TAVILY_API_KEY is not set. Put it in the .env file.")
        logger.info("Using Tavily for web search")
        return TavilySearchClient(api_key=config.TAVILY_API_KEY)

    raise ConfigurationError(
        f"Unknown WEB_SEARCH_PROVIDER '{provider}'. "
        f"Must be one of: {', '.join([e.value for e in WebSearchProvider])}"
    )
