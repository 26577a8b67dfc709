"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api.openai_client import GenerationError
from retrieval.errors import RetrievalError
from server.dependencies import close_clients, get_config
from server.routes import ask, health, knowledge, web_search
from server.utils import ApiError, error_response
from tools.web.contracts import WebSearchError
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")

    config = get_config()
    required = {
        "NOTION_TOKEN": config.NOTION_TOKEN,
        "NOTION_CONFIG_DATABASE_ID": config.NOTION_CONFIG_DATABASE_ID,
        "LLM_API_KEY": config.LLM_API_KEY,
        "LLM_MODEL": config.LLM_MODEL,
    }
    missing = [k for k, v in required.items() if not v]
    if missing:
        logger.warning(f"Missing environment variables: {missing}")

    yield

    await close_clients()
    logger.info("FastAPI server shutting down")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError):
        return error_response(exc.status_code, exc.error, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, "ValidationError", "Request body is invalid")

    @app.exception_handler(RetrievalError)
    async def _retrieval_error(request: Request, exc: RetrievalError):
        logger.error(f"Knowledge retrieval failed: {exc}", extra={"extra_fields": {"path": request.url.path}})
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "InternalServerError", str(exc))

    @app.exception_handler(WebSearchError)
    async def _web_search_error(request: Request, exc: WebSearchError):
        logger.error(f"Web search failed: {exc}", extra={"extra_fields": {"path": request.url.path}})
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "InternalServerError", "failed to search web")

    @app.exception_handler(GenerationError)
    async def _generation_error(request: Request, exc: GenerationError):
        logger.error(f"Answer generation failed: {exc}", extra={"extra_fields": {"path": request.url.path}})
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "InternalServerError", str(exc))


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="Notion Knowledge Agent API",
        description="Knowledge retrieval over Notion databases with web-grounded answers",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(knowledge.router)
    app.include_router(web_search.router)
    app.include_router(ask.router)

    return app
