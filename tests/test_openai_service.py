"""Tests for the Groq vision client wrapper and the system prompt."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import openai
import pytest

from app.core.exceptions import AINotConfiguredError
from app.services import openai_service
from app.services.encoder import encode_images
from app.services.openai_service import (
    STRICT_OUTPUT_RULE,
    ModelCallError,
    VisionModelClient,
    build_system_prompt,
    get_ai_service,
)

from helpers import image_blob


@pytest.fixture
def configured(monkeypatch):
    monkeypatch.setattr(openai_service.settings, "groq_api_key", "gsk_test")


def _completion(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def test_prompt_ends_with_strict_rule():
    prompt = build_system_prompt()
    assert "ACORD 25" in prompt
    assert prompt.endswith("output exactly: null.")
    assert STRICT_OUTPUT_RULE in prompt


def test_requires_api_key(monkeypatch):
    monkeypatch.setattr(openai_service.settings, "groq_api_key", None)
    with pytest.raises(AINotConfiguredError):
        get_ai_service()


def test_client_settings(configured):
    client = VisionModelClient()
    assert client.client.max_retries == 0
    assert client.client.timeout == 60
    assert str(client.client.base_url).startswith("https://api.groq.com/openai/v1")


def test_messages_carry_images_in_order():
    images = encode_images([image_blob("a.png"), image_blob("b.png")])
    messages = VisionModelClient.build_messages("SYSTEM", images)

    assert messages[0] == {"role": "system", "content": "SYSTEM"}
    assert messages[1]["role"] == "user"
    urls = [part["image_url"]["url"] for part in messages[1]["content"]]
    assert urls == [images[0].data_uri, images[1].data_uri]


@pytest.mark.asyncio
async def test_complete_sends_deterministic_parameters(configured):
    client = VisionModelClient()
    create = AsyncMock(return_value=_completion('{"insurers": []}'))
    client.client.chat.completions.create = create

    text = await client.complete("scout", "SYSTEM", encode_images([image_blob()]))

    assert text == '{"insurers": []}'
    kwargs = create.await_args.kwargs
    assert kwargs["model"] == "scout"
    assert kwargs["temperature"] == 0
    assert kwargs["top_p"] == 1
    assert kwargs["max_completion_tokens"] == 8141


@pytest.mark.asyncio
async def test_complete_wraps_sdk_errors(configured):
    client = VisionModelClient()
    request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
    client.client.chat.completions.create = AsyncMock(
        side_effect=openai.APIConnectionError(request=request),
    )

    with pytest.raises(ModelCallError) as exc_info:
        await client.complete("scout", "SYSTEM", encode_images([image_blob()]))
    assert exc_info.value.model == "scout"


@pytest.mark.asyncio
async def test_complete_without_choices(configured):
    client = VisionModelClient()
    client.client.chat.completions.create = AsyncMock(return_value=SimpleNamespace(choices=[]))

    with pytest.raises(ModelCallError):
        await client.complete("scout", "SYSTEM", [])


@pytest.mark.asyncio
async def test_complete_none_content_is_empty_text(configured):
    client = VisionModelClient()
    client.client.chat.completions.create = AsyncMock(return_value=_completion(None))

    assert await client.complete("scout", "SYSTEM", []) == ""
