"""Tests for LLMClient with mocked litellm.acompletion."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pedibrief.core.config import LLMConfig
from pedibrief.exceptions import JSONParseError, NonRetryableError, RetryableError
from pedibrief.providers.client import Attachment, LLMClient


def _make_config(**overrides: Any) -> LLMConfig:
    defaults = {
        "api_key": "test-key",
        "model": "gemini/gemini-2.0-flash",
        "temperature": 0.0,
        "max_retries": 1,
    }
    defaults.update(overrides)
    return LLMConfig(**defaults)


def _mock_response(content: str = "test response") -> MagicMock:
    """Build a mock LiteLLM response object."""
    message = MagicMock()
    message.content = content

    choice = MagicMock()
    choice.message = message
    choice.finish_reason = "stop"

    response = MagicMock()
    response.choices = [choice]
    return response


class TestComplete:
    @pytest.mark.asyncio
    async def test_plain_prompt(self) -> None:
        client = LLMClient(_make_config())

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acomp:
            mock_acomp.return_value = _mock_response("hello")
            result = await client.complete("test prompt")

        assert result == "hello"
        kwargs = mock_acomp.call_args.kwargs
        assert kwargs["model"] == "gemini/gemini-2.0-flash"
        assert kwargs["messages"] == [{"role": "user", "content": "test prompt"}]
        assert kwargs["api_key"] == "test-key"
        assert "api_base" not in kwargs
        assert "response_format" not in kwargs

    @pytest.mark.asyncio
    async def test_system_prompt_comes_first(self) -> None:
        client = LLMClient(_make_config())

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acomp:
            mock_acomp.return_value = _mock_response()
            await client.complete("user text", system_prompt="be kind")

        messages = mock_acomp.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "be kind"}
        assert messages[1]["role"] == "user"

    @pytest.mark.asyncio
    async def test_attachment_sent_as_data_url(self) -> None:
        client = LLMClient(_make_config())
        attachment = Attachment(data=b"%PDF-1.4 fake", mime_type="application/pdf")

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acomp:
            mock_acomp.return_value = _mock_response()
            await client.complete("read this", attachments=[attachment])

        content = mock_acomp.call_args.kwargs["messages"][0]["content"]
        assert content[0] == {"type": "text", "text": "read this"}
        assert content[1]["type"] == "image_url"
        assert content[1]["image_url"]["url"].startswith("data:application/pdf;base64,")

    @pytest.mark.asyncio
    async def test_placeholder_key_and_base_url(self) -> None:
        client = LLMClient(_make_config(api_key="no-key", base_url="http://localhost:11434"))

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acomp:
            mock_acomp.return_value = _mock_response()
            await client.complete("hi", model="ollama/llama3")

        kwargs = mock_acomp.call_args.kwargs
        assert "api_key" not in kwargs
        assert kwargs["api_base"] == "http://localhost:11434"
        assert kwargs["model"] == "ollama/llama3"

    @pytest.mark.asyncio
    async def test_non_retryable_error_raised_immediately(self) -> None:
        client = LLMClient(_make_config(max_retries=3))

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acomp, patch.object(
            LLMClient, "_is_retryable", return_value=False
        ):
            mock_acomp.side_effect = RuntimeError("bad key")
            with pytest.raises(NonRetryableError):
                await client.complete("hi")

        assert mock_acomp.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_then_gives_up(self) -> None:
        client = LLMClient(_make_config(max_retries=2))

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acomp, patch(
            "pedibrief.providers.client.asyncio.sleep", new_callable=AsyncMock
        ) as mock_sleep:
            mock_acomp.side_effect = RuntimeError("503")
            with pytest.raises(RetryableError, match="after 2 attempt"):
                await client.complete("hi")

        assert mock_acomp.await_count == 2
        assert mock_sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_retry_recovers(self) -> None:
        client = LLMClient(_make_config(max_retries=2))

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acomp, patch(
            "pedibrief.providers.client.asyncio.sleep", new_callable=AsyncMock
        ):
            mock_acomp.side_effect = [RuntimeError("503"), _mock_response("ok")]
            assert await client.complete("hi") == "ok"


class TestCompleteJson:
    @pytest.mark.asyncio
    async def test_parses_fenced_json(self) -> None:
        client = LLMClient(_make_config())

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acomp:
            mock_acomp.return_value = _mock_response('Here you go:\n```json\n{"isCorrect": true}\n```')
            result = await client.complete_json("grade")

        assert result == {"isCorrect": True}
        assert mock_acomp.call_args.kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_raises_on_unparseable(self) -> None:
        client = LLMClient(_make_config())

        with patch("litellm.acompletion", new_callable=AsyncMock) as mock_acomp:
            mock_acomp.return_value = _mock_response("I cannot help with that.")
            with pytest.raises(JSONParseError) as exc_info:
                await client.complete_json("grade")

        assert exc_info.value.raw_response == "I cannot help with that."


class TestExtractJson:
    def test_trailing_comma(self) -> None:
        assert LLMClient.extract_json('{"a": [1, 2,],}') == {"a": [1, 2]}

    def test_embedded_object(self) -> None:
        assert LLMClient.extract_json('Sure! {"a": "b {c}"} thanks') == {"a": "b {c}"}

    def test_nothing_found(self) -> None:
        assert LLMClient.extract_json("no json here") == {}
