"""Async LLM client routed through LiteLLM for multi-provider support.

Gemini is the default backend (``gemini/`` model prefix); ``openai/``,
``anthropic/`` and ``ollama/`` prefixes work transparently. Documents are
sent inline as base64 data URLs so that PDFs and photos of discharge
paperwork reach multimodal models without an upload step.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import random
import re
from dataclasses import dataclass
from typing import Any

from pedibrief.core.config import LLMConfig
from pedibrief.exceptions import JSONParseError, NonRetryableError, RetryableError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Attachment:
    """Binary document passed alongside a prompt."""

    data: bytes
    mime_type: str

    def to_content_block(self) -> dict[str, Any]:
        encoded = base64.b64encode(self.data).decode("ascii")
        return {
            "type": "image_url",
            "image_url": {"url": f"data:{self.mime_type};base64,{encoded}"},
        }


class LLMClient:
    """Async LLM client using LiteLLM."""

    def __init__(self, config: LLMConfig) -> None:
        self._config = config

    @property
    def model(self) -> str:
        return self._config.model

    @staticmethod
    def _is_retryable(exc: Exception) -> bool:
        """Classify whether an LLM API error should be retried.

        Non-retryable: AuthenticationError, BadRequestError, NotFoundError (4xx non-429).
        Retryable (default): everything else including rate limits, timeouts, 5xx.
        """
        from litellm.exceptions import (
            AuthenticationError,
            BadRequestError,
            NotFoundError,
        )

        non_retryable = (AuthenticationError, BadRequestError, NotFoundError)
        return not isinstance(exc, non_retryable)

    def _build_messages(
        self,
        prompt: str,
        system_prompt: str | None,
        attachments: list[Attachment] | None,
    ) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        if attachments:
            content: list[dict[str, Any]] = [{"type": "text", "text": prompt}]
            content.extend(a.to_content_block() for a in attachments)
            messages.append({"role": "user", "content": content})
        else:
            messages.append({"role": "user", "content": prompt})
        return messages

    async def complete(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        attachments: list[Attachment] | None = None,
        model: str | None = None,
        temperature: float | None = None,
        json_mode: bool = False,
    ) -> str:
        """Single completion, returns content string.

        Args:
            prompt: User message content.
            system_prompt: Optional system message.
            attachments: Documents sent as inline content blocks after the prompt.
            model: Override model ID. Supports LiteLLM prefixes (e.g. ``gemini/``).
            temperature: Override temperature.
            json_mode: Ask the provider for a JSON object response.
        """
        from litellm import acompletion

        messages = self._build_messages(prompt, system_prompt, attachments)
        kwargs: dict[str, Any] = {
            "model": model or self._config.model,
            "messages": messages,
            "temperature": temperature if temperature is not None else self._config.temperature,
            "top_p": self._config.top_p,
            "timeout": self._config.timeout,
        }
        if self._config.api_key not in ("", "no-key"):
            kwargs["api_key"] = self._config.api_key
        if self._config.base_url:
            kwargs["api_base"] = self._config.base_url
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        max_retries = self._config.max_retries
        last_error: Exception | None = None
        for attempt in range(max_retries):
            try:
                response = await acompletion(**kwargs)
                return response.choices[0].message.content or ""
            except Exception as e:
                last_error = e
                if not self._is_retryable(e):
                    raise NonRetryableError(f"Non-retryable LLM error: {e}") from e

                base_wait = min(2**attempt, self._config.retry_max_delay)
                wait = base_wait + random.uniform(0, base_wait * 0.5)
                log.warning(
                    "LLM retry %d/%d: %s (wait=%.1fs)",
                    attempt + 1, max_retries, type(e).__name__, wait,
                )
                if attempt < max_retries - 1:
                    await asyncio.sleep(wait)

        raise RetryableError(
            f"LLM API failed after {max_retries} attempt(s): {last_error}"
        ) from last_error

    async def complete_json(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        attachments: list[Attachment] | None = None,
        model: str | None = None,
    ) -> dict[str, Any]:
        """Completion parsed into a JSON object. Raises ``JSONParseError`` otherwise."""
        content = await self.complete(
            prompt,
            system_prompt=system_prompt,
            attachments=attachments,
            model=model,
            json_mode=True,
        )
        parsed = self.extract_json(content)
        if not isinstance(parsed, dict) or not parsed:
            raise JSONParseError("LLM response did not contain a JSON object", raw_response=content)
        return parsed

    # ── JSON extraction (static) ─────────────────────────────────────

    @staticmethod
    def extract_json(content: str) -> Any:
        """Parse JSON from LLM response, handling fences, prose, and trailing commas."""

        def _try_parse(s: str) -> Any | None:
            s = s.strip()
            if not s:
                return None
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                pass
            s = re.sub(r",\s*([}\]])", r"\1", s)
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None

        # Strategy 1: ```json ... ``` or bare ``` fences
        for fence in ("```json", "```"):
            fence_start = content.find(fence)
            if fence_start != -1:
                inner = content[fence_start + len(fence):]
                fence_end = inner.find("```")
                if fence_end != -1:
                    result = _try_parse(inner[:fence_end])
                    if result is not None:
                        return result

        # Strategy 2: full content as JSON
        result = _try_parse(content)
        if result is not None:
            return result

        # Strategy 3: first balanced { ... } in the response
        idx = content.find("{")
        if idx != -1:
            depth = 0
            in_string = False
            escape = False
            for i in range(idx, len(content)):
                ch = content[i]
                if escape:
                    escape = False
                    continue
                if ch == "\\":
                    escape = True
                    continue
                if ch == '"':
                    in_string = not in_string
                    continue
                if in_string:
                    continue
                if ch == "{":
                    depth += 1
                elif ch == "}":
                    depth -= 1
                    if depth == 0:
                        result = _try_parse(content[idx : i + 1])
                        if result is not None:
                            return result
                        break

        log.error("Failed to parse JSON from LLM response", extra={"response_length": len(content)})
        return {}
