"""FastAPI dependencies providing the shared clients and services.

Each dependency builds its object once per process (singleton pattern) and
tests replace them through ``app.dependency_overrides``.
"""

from agent.agent_core import PersonalAgent
from api.notion_source_client import NotionSourceClient
from api.openai_client import OpenAICompletionClient
from config.config import Config
from retrieval.core import RetrievalOrchestrator
from retrieval.keywords import load_lexicon
from tools.web import create_web_search_client_from_env
from utils.logger import get_logger

logger = get_logger(__name__)


def get_config() -> Config:
    if not hasattr(get_config, "_instance"):
        get_config._instance = Config()
    return get_config._instance


def get_retrieval_orchestrator() -> RetrievalOrchestrator:
    """Orchestrator over a process-wide Notion client; raises ConfigurationError without credentials."""
    if not hasattr(get_retrieval_orchestrator, "_instance"):
        config = get_config()
        client = NotionSourceClient.from_config(config)
        get_retrieval_orchestrator._instance = RetrievalOrchestrator.from_config(
            client, config, lexicon=load_lexicon(config.KEYWORD_LEXICON_PATH)
        )
    return get_retrieval_orchestrator._instance


def get_web_search_client():
    if not hasattr(get_web_search_client, "_instance"):
        get_web_search_client._instance = create_web_search_client_from_env(get_config())
    return get_web_search_client._instance


def get_agent() -> PersonalAgent:
    if not hasattr(get_agent, "_instance"):
        config = get_config()
        get_agent._instance = PersonalAgent(
            retrieval=get_retrieval_orchestrator(),
            web_client=get_web_search_client(),
            generator=OpenAICompletionClient.from_config(config),
            answer_language=config.ANSWER_LANGUAGE,
        )
    return get_agent._instance


async def close_clients() -> None:
    """Close the HTTP clients created by the dependencies above."""
    orchestrator = getattr(get_retrieval_orchestrator, "_instance", None)
    if orchestrator is not None:
        await orchestrator.client.aclose()
        del get_retrieval_orchestrator._instance

    web_client = getattr(get_web_search_client, "_instance", None)
    if web_client is not None:
        await web_client.aclose()
        del get_web_search_client._instance

    if hasattr(get_agent, "_instance"):
        del get_agent._instance
