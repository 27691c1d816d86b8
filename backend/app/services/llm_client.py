"""Unified LLM client used by the adaptive question flow.

Providers are tried in order (OpenAI, then Anthropic). A provider is only
instantiated when the capability matrix enables it, so an unconfigured
deployment never builds an SDK client.
"""

import logging

from openai import AsyncOpenAI
import anthropic

from app.config import Settings, settings
from app.services.capability_matrix import CapabilityMatrix, get_capability_matrix

logger = logging.getLogger(__name__)


class LLMClient:
    """Async completion over whichever LLM providers are enabled."""

    def __init__(self, matrix: CapabilityMatrix | None = None, source: Settings | None = None):
        self._matrix = matrix
        self._settings = source or settings
        self._providers: list[tuple[str, object]] | None = None
        self.last_provider: str | None = None

    def _init_clients(self) -> list[tuple[str, object]]:
        if self._providers is not None:
            return self._providers

        matrix = self._matrix or get_capability_matrix()
        timeout = self._settings.llm_timeout_seconds
        providers: list[tuple[str, object]] = []
        if matrix.is_enabled("openai"):
            providers.append(("openai", AsyncOpenAI(api_key=self._settings.openai_api_key, timeout=timeout)))
        if matrix.is_enabled("anthropic"):
            providers.append((
                "anthropic",
                anthropic.AsyncAnthropic(api_key=self._settings.anthropic_api_key, timeout=timeout),
            ))

        logger.info(f"LLM providers: {[name for name, _ in providers] or 'none'}")
        self._providers = providers
        return providers

    @property
    def available(self) -> bool:
        return bool(self._init_clients())

    async def complete(
        self,
        system: str,
        user: str,
        *,
        max_tokens: int = 1000,
        temperature: float = 0,
        json_mode: bool = False,
    ) -> str:
        """Text completion from the first provider that answers.

        Raises:
            RuntimeError: no provider is enabled, or every enabled one failed.
        """
        providers = self._init_clients()
        if not providers:
            raise RuntimeError("No LLM provider configured")

        messages = [{"role": "user", "content": user}]
        errors = []
        for name, client in providers:
            try:
                if name == "openai":
                    text = await self._openai_complete(client, system, messages, max_tokens, temperature, json_mode)
                else:
                    text = await self._anthropic_complete(client, system, messages, max_tokens, temperature)
            except Exception as e:
                errors.append(f"{name}: {e}")
                logger.warning(f"LLM provider {name} failed: {e}")
                continue
            self.last_provider = name
            return text

        raise RuntimeError(f"All LLM providers failed: {'; '.join(errors)}")

    async def _openai_complete(self, client, system, messages, max_tokens, temperature, json_mode) -> str:
        kwargs: dict = {
            "model": self._settings.openai_model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "system", "content": system}] + messages,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = await client.chat.completions.create(**kwargs)
        return (response.choices[0].message.content or "").strip()

    async def _anthropic_complete(self, client, system, messages, max_tokens, temperature) -> str:
        response = await client.messages.create(
            model=self._settings.anthropic_model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=system,
            messages=messages,
        )
        return response.content[0].text.strip()


# Singleton
llm_client = LLMClient()
