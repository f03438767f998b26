"""OpenAI-compatible chat-completion client."""
from __future__ import annotations

import logging
import re
from typing import Optional

from flask import current_app
from openai import APIError, OpenAI

from ..core.exceptions import ProviderError

log = logging.getLogger(__name__)

_CITATION = re.compile(r"\[\d+\]")

EXTENSION_KEY = "opsdesk.chat_client"


def clean_reply(text: str) -> str:
    """Drop numeric citation markers and bold markup from a model reply."""
    return _CITATION.sub("", text).replace("**", "")


class ChatClient:
    def __init__(
        self,
        *,
        api_key: Optional[str],
        base_url: Optional[str],
        model: str,
        max_tokens: int = 1024,
        temperature: float = 0.7,
        timeout: float = 30.0,
    ):
        self.api_key = api_key or ""
        self.base_url = base_url or None
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self._client: Optional[OpenAI] = None

    @classmethod
    def from_config(cls, config) -> "ChatClient":
        return cls(
            api_key=config.get("AI_API_KEY"),
            base_url=config.get("AI_BASE_URL"),
            model=config.get("AI_MODEL", "sonar"),
            max_tokens=int(config.get("AI_MAX_TOKENS", 1024)),
            temperature=float(config.get("AI_TEMPERATURE", 0.7)),
            timeout=float(config.get("AI_TIMEOUT_SECONDS", 30)),
        )

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def client(self) -> OpenAI:
        if not self.available:
            raise ProviderError("Chat provider API key is not configured")
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
            log.debug("Chat client initialized (base_url=%s, model=%s)", self.base_url, self.model)
        return self._client

    def complete(
        self,
        *,
        system: str,
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        try:
            resp = self.client().chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=max_tokens or self.max_tokens,
                temperature=self.temperature if temperature is None else temperature,
            )
        except APIError as e:
            raise ProviderError(f"Chat provider error: {e}") from e

        content = resp.choices[0].message.content if resp.choices else None
        if not content:
            raise ProviderError("Chat provider returned an empty reply")
        return content


def get_chat_client() -> ChatClient:
    return current_app.extensions[EXTENSION_KEY]
