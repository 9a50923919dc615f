"""Sends rendered prompts to a text-generation service."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from openai import OpenAI, OpenAIError

from .exceptions import TransportError

logger = logging.getLogger(__name__)

class TranslationTransport(ABC):
    """Abstract base class for translation services."""

    @abstractmethod
    def translate(self, request_body: str) -> str:
        """
        Sends one request and returns the raw reply.

        Args:
            request_body: The complete prompt, instruction and batch payload.

        Returns:
            The free-text reply, never empty.

        Raises:
            TransportError: If the service fails or returns no content.
        """
        pass

class OpenAIChatTransport(TranslationTransport):
    """Implements translation through the OpenAI Chat Completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.4,
        base_url: Optional[str] = None,
        client: Optional[OpenAI] = None
    ):
        """
        Initializes the OpenAIChatTransport.

        Args:
            api_key: API key. Ignored when ``client`` is given.
            model: Chat model name.
            temperature: Sampling temperature.
            base_url: Alternative endpoint for OpenAI compatible services.
            client: Pre-built client, mainly for tests.

        Raises:
            TransportError: If the client cannot be created.
        """
        self.model = model
        self.temperature = temperature
        if client is not None:
            self.client = client
        else:
            try:
                self.client = OpenAI(api_key=api_key, base_url=base_url)
            except OpenAIError as e:
                raise TransportError(f"Could not initialize OpenAI client: {e}") from e
        logger.info(f"Initialized OpenAIChatTransport with model '{self.model}' (temperature {self.temperature})")

    def translate(self, request_body: str) -> str:
        logger.debug(f"Sending prompt ({len(request_body)} chars) to '{self.model}'")
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": request_body}],
                temperature=self.temperature,
            )
        except OpenAIError as e:
            raise TransportError(f"Chat completion request failed: {e}") from e

        choices = getattr(completion, "choices", None)
        if not choices:
            raise TransportError("Chat completion returned no choices.")
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str) or not content.strip():
            raise TransportError("Chat completion returned an empty message.")
        return content

class EchoTransport(TranslationTransport):
    """Returns every request unchanged. Useful as a dry run."""

    def translate(self, request_body: str) -> str:
        if not request_body:
            raise TransportError("Nothing to echo.")
        return request_body
