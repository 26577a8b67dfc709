import openai

from retrieval.errors import ConfigurationError
from utils.logger import get_logger

from .base_client import BaseCompletionClient

logger = get_logger(__name__)


class GenerationError(Exception):
    """The generation provider failed to produce an answer."""


class OpenAICompletionClient(BaseCompletionClient):
    """
    Completion client for any OpenAI-compatible chat completions endpoint.

    ``base_url`` points the SDK at a self-hosted or third-party endpoint; None
    uses api.openai.com.
    """

    def __init__(self, api_key: str, model_name: str, base_url: str | None = None, **kwargs):
        """
        Initialize the client.

        Args:
            api_key: API key for the endpoint
            model_name: Model to request
            base_url: Optional base URL of an OpenAI-compatible API
            **kwargs: Additional keyword arguments
        """
        super().__init__(api_key, model_name=model_name, **kwargs)
        self.client = kwargs.get('client') or openai.OpenAI(api_key=api_key, base_url=base_url)
        self.model_name = model_name

    @classmethod
    def from_config(cls, config) -> "OpenAICompletionClient":
        if not config.LLM_API_KEY or not config.LLM_MODEL:
            raise ConfigurationError("LLM_API_KEY / LLM_MODEL are not set.")
        return cls(api_key=config.LLM_API_KEY, model_name=config.LLM_MODEL, base_url=config.LLM_API_BASE_URL)

    def complete(self, prompt: str, **kwargs) -> str:
        """
        Send ``prompt`` as a single user message.

        Args:
            prompt: The input prompt to send to the model
            **kwargs: Additional parameters for the API call
                - model: Override the default model for this call
                - temperature: Controls randomness (0.0 to 2.0)
                - max_tokens: Maximum number of tokens to generate

        Raises:
            GenerationError: If the API call fails
        """
        params = {
            'model': kwargs.get('model', self.model_name),
            'messages': [{"role": "user", "content": prompt}],
        }
        if kwargs.get('temperature') is not None:
            params['temperature'] = kwargs['temperature']
        if kwargs.get('max_tokens') is not None:
            params['max_tokens'] = kwargs['max_tokens']

        try:
            response = self.client.chat.completions.create(**params)
        except openai.OpenAIError as e:
            logger.error(f"Completion request failed: {e}", extra={"extra_fields": {"model": params['model']}})
            raise GenerationError(f"Completion request failed: {e}") from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
