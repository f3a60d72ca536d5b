"""
LLM Backends
============
Pluggable language-model backends behind the plant care advisor.

* ``OpenAIBackend`` uses the ``openai`` SDK (Chat Completions).
* ``AnthropicBackend`` uses the ``anthropic`` SDK (Messages).

Both SDKs are optional and imported inside :meth:`LLMBackend.initialize`; a
missing SDK disables advice rather than breaking start-up.

::

    backend = create_backend("openai", api_key="sk-...")
    if backend is not None:
        reply = backend.generate(system_prompt="...", user_prompt="Monstera", json_mode=True)
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-haiku-latest",
}


@dataclass
class LLMResponse:
    """Text returned by a backend plus bookkeeping."""

    text: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: float = 0.0


class LLMBackend(ABC):
    """Base class for every backend."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider identifier, e.g. ``"openai"``."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """``True`` once :meth:`initialize` succeeded."""

    @abstractmethod
    def initialize(self) -> bool:
        """Create the SDK client. Returns ``True`` on success."""

    @abstractmethod
    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = 400,
        temperature: float = 0.2,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Return one completion for ``user_prompt``."""

    def _timed(self, fn, *args, **kwargs):
        started = time.perf_counter()
        result = fn(*args, **kwargs)
        return result, (time.perf_counter() - started) * 1000


class OpenAIBackend(LLMBackend):
    def __init__(self, api_key: str, model: str = DEFAULT_MODELS["openai"], timeout: int = 30):
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._client: Any = None

    @property
    def name(self) -> str:
        return "openai"

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def initialize(self) -> bool:
        if not self._api_key:
            logger.warning("OpenAI backend: no API key provided")
            return False
        try:
            import openai

            self._client = openai.OpenAI(api_key=self._api_key, timeout=self._timeout)
        except ImportError:
            logger.error("OpenAI backend: 'openai' package not installed. Run: pip install openai")
            return False
        except Exception as exc:
            logger.error("OpenAI backend init failed: %s", exc)
            return False
        logger.info("OpenAI backend initialised (model=%s)", self._model)
        return True

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = 400,
        temperature: float = 0.2,
        json_mode: bool = False,
    ) -> LLMResponse:
        if not self.is_available:
            raise RuntimeError("OpenAI backend not initialised")

        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response, latency = self._timed(self._client.chat.completions.create, **kwargs)
        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
            }
        return LLMResponse(
            text=response.choices[0].message.content or "",
            model=response.model,
            usage=usage,
            latency_ms=latency,
        )


class AnthropicBackend(LLMBackend):
    def __init__(self, api_key: str, model: str = DEFAULT_MODELS["anthropic"], timeout: int = 30):
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._client: Any = None

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def initialize(self) -> bool:
        if not self._api_key:
            logger.warning("Anthropic backend: no API key provided")
            return False
        try:
            import anthropic

            self._client = anthropic.Anthropic(api_key=self._api_key, timeout=self._timeout)
        except ImportError:
            logger.error("Anthropic backend: 'anthropic' package not installed. Run: pip install anthropic")
            return False
        except Exception as exc:
            logger.error("Anthropic backend init failed: %s", exc)
            return False
        logger.info("Anthropic backend initialised (model=%s)", self._model)
        return True

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int = 400,
        temperature: float = 0.2,
        json_mode: bool = False,
    ) -> LLMResponse:
        if not self.is_available:
            raise RuntimeError("Anthropic backend not initialised")

        # no native JSON mode; ask for it in the prompt
        prompt = user_prompt
        if json_mode:
            prompt += "\n\nRespond ONLY with valid JSON, no markdown fences."

        response, latency = self._timed(
            self._client.messages.create,
            model=self._model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system_prompt,
            messages=[{"role": "user", "content": prompt}],
        )
        text = response.content[0].text if response.content else ""
        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
            }
        return LLMResponse(text=text, model=response.model, usage=usage, latency_ms=latency)


_BACKENDS = {
    "openai": OpenAIBackend,
    "anthropic": AnthropicBackend,
}


def create_backend(provider: str, *, api_key: str = "", model: str = "", timeout: int = 30) -> LLMBackend | None:
    """Build and initialise the backend named by ``provider``.

    Returns ``None`` for ``"none"``, for unknown providers and when
    initialisation fails.
    """
    provider = (provider or "").strip().lower()
    if provider in ("", "none"):
        logger.info("LLM provider set to 'none'; care advice uses the fallback")
        return None

    backend_cls = _BACKENDS.get(provider)
    if backend_cls is None:
        logger.error("Unknown LLM provider '%s'", provider)
        return None

    backend = backend_cls(api_key=api_key, model=model or DEFAULT_MODELS[provider], timeout=timeout)
    if backend.initialize():
        return backend
    logger.warning("LLM backend '%s' failed to initialise; care advice disabled", provider)
    return None
