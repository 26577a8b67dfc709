import argparse
import asyncio
import sys
import threading
import time

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from agent.agent_core import AgentMode, PersonalAgent
from api.notion_source_client import NotionSourceClient
from api.openai_client import OpenAICompletionClient
from config.config import Config
from retrieval.core import RetrievalOrchestrator
from retrieval.keywords import load_lexicon
from tools.web import create_web_search_client_from_env


def build_agent(config: Config, mode: AgentMode) -> PersonalAgent:
    """
    Build the agent with only the collaborators ``mode`` needs.

    Every check that can fail runs before the first HTTP client is opened, so a
    configuration error never leaves a client unclosed.

    Raises:
        ConfigurationError: If required credentials are missing
    """
    generator = OpenAICompletionClient.from_config(config)

    lexicon = None
    if mode.uses_knowledge:
        config.require_notion()
        lexicon = load_lexicon(config.KEYWORD_LEXICON_PATH)

    web_client = create_web_search_client_from_env(config) if mode.uses_web else None

    retrieval = None
    if mode.uses_knowledge:
        client = NotionSourceClient.from_config(config)
        retrieval = RetrievalOrchestrator.from_config(client, config, lexicon=lexicon)

    return PersonalAgent(
        retrieval=retrieval,
        web_client=web_client,
        generator=generator,
        answer_language=config.ANSWER_LANGUAGE,
    )


def show_loading_animation(stop_event: threading.Event) -> None:
    """
    Show a loading animation in the console.

    Args:
        stop_event: A threading.Event that will be set to stop the animation
    """
    while not stop_event.is_set():
        for char in '|/-\\':
            if stop_event.is_set():
                break
            sys.stderr.write(f'\r\033[93mThinking {char}\033[0m')
            sys.stderr.flush()
            time.sleep(0.1)
    sys.stderr.write('\r' + ' ' * 20 + '\r')
    sys.stderr.flush()


async def _ask(agent: PersonalAgent, question: str, mode: AgentMode):
    try:
        return await agent.run(question, mode)
    finally:
        if agent.retrieval is not None:
            await agent.retrieval.client.aclose()
        if agent.web_client is not None:
            await agent.web_client.aclose()


def print_sources(result) -> None:
    if not result.found_anything:
        return
    print("=== Sources ===")
    if result.knowledge_results:
        print("\n[Notion]")
        for idx, r in enumerate(result.knowledge_results[:10], start=1):
            print(f"  [{idx}] {r.title} ({r.link or 'no URL'})")
    if result.web_results:
        print("\n[Web]")
        for idx, r in enumerate(result.web_results[:10], start=1):
            print(f"  [{idx}] {r.title} ({r.link})")
    print()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ask the personal knowledge agent a question")
    parser.add_argument("question", nargs="*", help="Question to ask")
    parser.add_argument(
        "--mode",
        choices=[m.value for m in AgentMode],
        default=AgentMode.DEFAULT.value,
        help="Which sources to search",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    question = " ".join(args.question).strip()

    if not question:
        print("Error: please provide a question.", file=sys.stderr)
        print('Usage: python main.py "your question" [--mode default|notion-only|web-only]', file=sys.stderr)
        print('Example: python main.py "TypeScriptに関する情報を教えて"', file=sys.stderr)
        return 1

    mode = AgentMode(args.mode)

    try:
        agent = build_agent(Config(), mode)
    except Exception as e:
        print(f"Error initializing agent: {str(e)}", file=sys.stderr)
        return 1

    stop_animation = threading.Event()
    loading_thread = threading.Thread(target=show_loading_animation, args=(stop_animation,))
    loading_thread.daemon = True
    loading_thread.start()

    try:
        result = asyncio.run(_ask(agent, question, mode))
    except Exception as e:
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1
    finally:
        stop_animation.set()
        loading_thread.join()

    print(f"Search query: {result.search_query}\n")
    print_sources(result)
    print("=== Answer ===")
    print(result.answer)
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
