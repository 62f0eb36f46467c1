"""LLM provider interface and implementations."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx
import ollama
import openai
from ollama import ResponseError
from openai import OpenAI

from .errors import GenerationError, GenerationTimeoutError, QuotaExceededError

logger = logging.getLogger(__name__)


@dataclass
class GeneratedImage:
    """Image returned by a provider, either hosted or inline"""
    url: Optional[str] = None
    b64_json: Optional[str] = None


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    name = "provider"

    @abstractmethod
    def complete(self, system: str, user: str, timeout: float) -> str:
        """
        Run one chat completion.

        Args:
            system: System instruction
            user: User message
            timeout: Deadline in seconds; the request is aborted when it passes

        Returns:
            Raw response text

        Raises:
            GenerationTimeoutError: Deadline exceeded
            QuotaExceededError: Quota or rate limit hit
            GenerationError: Any other provider failure
        """

    def generate_image(self, prompt: str, timeout: float) -> Optional[GeneratedImage]:
        """Generate an illustration; providers without image support return None."""
        return None


class OpenAIProvider(LLMProvider):
    """OpenAI implementation of LLM provider."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        image_model: str = "dall-e-3",
        base_url: Optional[str] = None,
        client: Optional[OpenAI] = None,
    ) -> None:
        # No SDK retries: a retry would silently extend the caller's deadline
        self.client = client or OpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        self.model = model
        self.image_model = image_model

    def complete(self, system: str, user: str, timeout: float) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                temperature=0.7,
                max_tokens=2000,
                timeout=timeout,
            )
        except openai.APITimeoutError as e:
            raise GenerationTimeoutError(f"OpenAI request timed out after {timeout:.0f}s") from e
        except openai.RateLimitError as e:
            raise QuotaExceededError(f"OpenAI quota exceeded: {e}") from e
        except openai.APIError as e:
            raise GenerationError(f"OpenAI request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GenerationError("No response from OpenAI")
        return content

    def generate_image(self, prompt: str, timeout: float) -> Optional[GeneratedImage]:
        response = self.client.images.generate(
            model=self.image_model,
            prompt=prompt,
            size="1792x1024",
            n=1,
            timeout=timeout,
        )
        if not response.data:
            return None
        image = response.data[0]
        return GeneratedImage(url=image.url, b64_json=image.b64_json)


class OllamaProvider(LLMProvider):
    """Local Ollama implementation; text only."""

    name = "ollama"

    def __init__(
        self,
        model: str,
        host: str,
        timeout: float,
        client: Optional[ollama.Client] = None,
    ) -> None:
        self.model = model
        # The deadline is enforced by the underlying httpx client
        self._client = client or ollama.Client(host=host, timeout=timeout)

    def complete(self, system: str, user: str, timeout: float) -> str:
        try:
            response = self._client.chat(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                format="json",
                options={"temperature": 0.7, "num_predict": 2000},
            )
        except httpx.TimeoutException as e:
            raise GenerationTimeoutError(f"Ollama request timed out after {timeout:.0f}s") from e
        except ResponseError as e:
            if e.status_code == 429:
                raise QuotaExceededError(f"Ollama rate limited: {e}") from e
            raise GenerationError(f"Ollama request failed: {e}") from e
        except (httpx.HTTPError, ConnectionError) as e:
            raise GenerationError(f"Ollama server unreachable: {e}") from e

        content = response["message"]["content"]
        if not content:
            raise GenerationError("No response from Ollama")
        return content
