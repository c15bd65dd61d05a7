"""Text generation client.

Provider-agnostic via LiteLLM: any model string LiteLLM understands
(``anthropic/...``, ``openai/...``, ``ollama/...``) works. The orchestrator
only depends on the ``TextGenerator`` protocol, so tests pass plain stub
classes instead.
"""

import logging
from typing import Optional, Protocol

from .circuit_breaker import get_breaker
from .prompts import SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class TextGenerationError(Exception):
    """The model call failed or returned nothing usable."""


class TextGenerator(Protocol):
    """Anything that can turn a prompt into text."""

    async def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        ...


class LiteLLMTextGenerator:
    """``TextGenerator`` backed by ``litellm.acompletion``.

    Each call checks the per-model circuit breaker first and records the
    outcome afterwards. Any provider exception is re-raised as-is so the
    caller can treat it as a retryable failure.
    """

    def __init__(
        self,
        model: str,
        api_key: str = "",
        api_base: str = "",
        timeout: int = 180,
        system_prompt: str = SYSTEM_PROMPT,
        failure_threshold: Optional[int] = None,
        cooldown_seconds: Optional[float] = None,
    ):
        self.model = model
        self.api_key = api_key
        self.api_base = api_base
        self.timeout = timeout
        self.system_prompt = system_prompt
        self.breaker = get_breaker(
            model,
            failure_threshold=failure_threshold,
            cooldown_seconds=cooldown_seconds,
        )

    async def complete(self, prompt: str, max_tokens: int, temperature: float) -> str:
        self.breaker.before_call()

        import litellm

        kwargs: dict = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens,
            "temperature": temperature,
            "timeout": self.timeout,
        }
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base

        try:
            response = await litellm.acompletion(**kwargs)
            text = response.choices[0].message.content or ""
            if not text.strip():
                raise TextGenerationError(f"Model '{self.model}' returned an empty completion")
        except Exception:
            self.breaker.record_failure()
            raise

        self.breaker.record_success()
        finish_reason = getattr(response.choices[0], "finish_reason", None)
        logger.debug(
            "Model call finished",
            extra={"model": self.model, "chars": len(text), "finish_reason": finish_reason},
        )
        return text
