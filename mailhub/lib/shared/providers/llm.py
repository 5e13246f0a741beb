import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import requests

from mailhub.lib.shared.models.settings import AIConfig, AIProvider

logger = logging.getLogger(__name__)

# Answer used when a provider replies with something we can't read
FALLBACK_ANSWER = "normal"
MAX_RESPONSE_TOKENS = 50


class ProviderError(Exception):
    """The provider could not be reached or refused the request"""


class ClassificationProvider(ABC):
    """Sends a single-turn prompt to a hosted LLM and returns its text answer"""

    default_endpoint: str = ""
    default_model: str = ""

    def __init__(self, config: AIConfig, timeout: float = 30.0):
        self.config = config
        self.timeout = timeout

    @property
    def model(self) -> str:
        return self.config.model or self.default_model

    @property
    def endpoint(self) -> str:
        return self.config.api_endpoint or self.default_endpoint

    @abstractmethod
    def build_request(self, prompt: str) -> Tuple[Dict[str, str], Optional[Dict[str, str]], Dict[str, Any]]:
        """Returns (headers, query params, json payload)"""

    @abstractmethod
    def parse_response(self, data: Any) -> Optional[str]:
        """Pulls the answer text out of the decoded response body"""

    def classify(self, prompt: str) -> str:
        headers, params, payload = self.build_request(prompt)
        try:
            response = requests.post(
                self.endpoint,
                headers=headers,
                params=params,
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"{self.config.provider.value} request failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            logger.warning(f"{self.config.provider.value} returned a non-JSON body, using '{FALLBACK_ANSWER}'")
            return FALLBACK_ANSWER

        answer = self.parse_response(data)
        if not isinstance(answer, str):
            logger.warning(f"{self.config.provider.value} response had no answer text, using '{FALLBACK_ANSWER}'")
            return FALLBACK_ANSWER
        return answer


def _dig(data: Any, *path) -> Any:
    """Walks nested dicts/lists, returning None as soon as a step is missing"""
    for key in path:
        try:
            data = data[key]
        except (KeyError, IndexError, TypeError):
            return None
    return data


class OpenAIProvider(ClassificationProvider):
    default_endpoint = "https://api.openai.com/v1/chat/completions"
    default_model = "gpt-3.5-turbo"

    def build_request(self, prompt: str):
        headers = {"Authorization": f"Bearer {self.config.api_key}"}
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": MAX_RESPONSE_TOKENS,
            "temperature": 0.3,
        }
        return headers, None, payload

    def parse_response(self, data: Any) -> Optional[str]:
        return _dig(data, "choices", 0, "message", "content")


class AnthropicProvider(ClassificationProvider):
    default_endpoint = "https://api.anthropic.com/v1/messages"
    default_model = "claude-3-haiku-20240307"
    api_version = "2023-06-01"

    def build_request(self, prompt: str):
        headers = {
            "x-api-key": self.config.api_key,
            "anthropic-version": self.api_version,
        }
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": MAX_RESPONSE_TOKENS,
        }
        return headers, None, payload

    def parse_response(self, data: Any) -> Optional[str]:
        return _dig(data, "content", 0, "text")


class GeminiProvider(ClassificationProvider):
    default_model = "gemini-pro"

    @property
    def endpoint(self) -> str:
        # The model is part of the default URL
        return self.config.api_endpoint or (
            f"https://generativelanguage.googleapis.com/v1/models/{self.model}:generateContent"
        )

    def build_request(self, prompt: str):
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"maxOutputTokens": MAX_RESPONSE_TOKENS},
        }
        return {}, {"key": self.config.api_key}, payload

    def parse_response(self, data: Any) -> Optional[str]:
        return _dig(data, "candidates", 0, "content", "parts", 0, "text")


PROVIDERS = {
    AIProvider.OPENAI: OpenAIProvider,
    AIProvider.ANTHROPIC: AnthropicProvider,
    AIProvider.GEMINI: GeminiProvider,
}


def get_classification_provider(config: AIConfig, timeout: float = 30.0) -> ClassificationProvider:
    """Returns the provider implementation selected by the AI config"""
    return PROVIDERS[AIProvider(config.provider)](config, timeout=timeout)
