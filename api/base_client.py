from abc import ABC, abstractmethod


class BaseCompletionClient(ABC):
    """
    Abstract base class for text generation clients.
    The agent only needs one capability: prompt text in, answer text out.
    """

    @abstractmethod
    def __init__(self, api_key: str, **kwargs):
        """
        Initialize the client.

        Args:
            api_key: API key for the generation service
            **kwargs: Additional provider-specific parameters
        """
        self.api_key = api_key
        self.model_name = kwargs.get('model_name')

    @abstractmethod
    def complete(self, prompt: str, **kwargs) -> str:
        """
        Generate a completion for a single user prompt.

        Args:
            prompt: The full prompt, grounding context included
            **kwargs: Additional parameters for the API call

        Returns:
            The generated text ("" when the provider returned no content)
        """
        pass
