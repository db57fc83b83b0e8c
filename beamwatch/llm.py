"""Reasoning-service client using PydanticAI + Anthropic.

Uses streaming by default to prevent network idle-timeout disconnections
on long-running requests. Every call is bounded by ``llm_timeout_s``;
any provider failure surfaces as ``ProviderError``.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog
from pydantic_ai.models.anthropic import AnthropicModelSettings

from beamwatch.config import Settings
from beamwatch.errors import ProviderError
from beamwatch.metrics import llm_tokens_total

if TYPE_CHECKING:
    from pydantic_ai import Agent
    from pydantic_ai.models import Model
    from pydantic_ai.usage import RunUsage

logger = structlog.get_logger()

_DEFAULT_SYSTEM = "You are a business analyst. Return only valid JSON."


async def _run_streamed(
    agent: Agent[None, str],
    prompt: str,
    model_settings: AnthropicModelSettings,
) -> tuple[str, RunUsage]:
    """Run a PydanticAI agent in streaming mode and return the final text.

    Streaming keeps the TCP connection alive with continuous data flow,
    preventing network-level idle timeouts (~60s on some NAT/routers).
    """
    async with agent.run_stream(prompt, model_settings=model_settings) as stream:
        async for _chunk in stream.stream_output():
            pass
        output: str = await stream.get_output()
        return output, stream.usage()


class LLMClient:
    """Async wrapper around the Anthropic API, returning plain text completions."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._model: Model | None = None

    @property
    def model(self) -> Model:
        if self._model is None:
            from pydantic_ai.models.anthropic import AnthropicModel
            from pydantic_ai.providers.anthropic import AnthropicProvider

            provider = AnthropicProvider(api_key=self.settings.anthropic_api_key)
            self._model = AnthropicModel(
                self.settings.llm_model,
                provider=provider,
            )
        return self._model

    @property
    def is_available(self) -> bool:
        return bool(self.settings.anthropic_api_key)

    def _build_model_settings(
        self,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> AnthropicModelSettings:
        """Build model_settings with Anthropic prompt caching enabled."""
        temp = temperature if temperature is not None else self.settings.llm_temperature
        tokens = max_tokens if max_tokens is not None else self.settings.llm_max_tokens
        return AnthropicModelSettings(
            temperature=temp,
            max_tokens=tokens,
            anthropic_cache_instructions=True,
        )

    def _log_and_record_usage(self, usage: RunUsage) -> None:
        """Log LLM usage and record Prometheus token counters."""
        logger.info(
            "LLM response",
            model=self.settings.llm_model,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            total_tokens=usage.total_tokens,
            cache_read_tokens=usage.cache_read_tokens or 0,
        )

        model_label = self.settings.llm_model
        llm_tokens_total.labels(model=model_label, token_type="request").inc(
            usage.input_tokens or 0
        )
        llm_tokens_total.labels(model=model_label, token_type="response").inc(
            usage.output_tokens or 0
        )
        llm_tokens_total.labels(model=model_label, token_type="cache_read").inc(
            usage.cache_read_tokens or 0
        )

    async def complete(
        self,
        prompt: str,
        system: str = "",
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Return the model's text response to *prompt*.

        Raises:
            ProviderError: The key is missing, the call timed out, or the
                provider returned an error.
        """
        if self._model is None and not self.is_available:
            raise ProviderError("anthropic", "API key not configured")

        from pydantic_ai import Agent

        agent: Agent[None, str] = Agent(
            self.model,
            output_type=str,
            system_prompt=system or _DEFAULT_SYSTEM,
        )
        model_settings = self._build_model_settings(temperature, max_tokens)

        logger.debug("LLM request", model=self.settings.llm_model, streaming=True)

        try:
            output, usage = await asyncio.wait_for(
                _run_streamed(agent, prompt, model_settings),
                timeout=self.settings.llm_timeout_s,
            )
        except TimeoutError as exc:
            raise ProviderError(
                "anthropic", f"no response within {self.settings.llm_timeout_s}s"
            ) from exc
        except Exception as exc:
            raise ProviderError("anthropic", str(exc)) from exc

        self._log_and_record_usage(usage)
        return output
