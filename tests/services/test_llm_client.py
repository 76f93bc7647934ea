"""Tests for the chat completion client and the timeout contract"""

import json

import httpx
import pytest

from codepilot.services.error_handler import LLMFailure, LLMTimeout
from codepilot.services.llm_client import (
    LLMClient,
    LLMConfig,
    LLMRequest,
    LLMResponse,
    request_completion,
)
from tests.conftest import FakeLLM


def make_llm(handler):
    config = LLMConfig(base_url="https://llm.test/v1/", api_key="sk-test", default_model="test-model")
    return LLMClient(config, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestLLMClient:
    @pytest.mark.asyncio
    async def test_complete(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "model": "test-model",
                "choices": [{"message": {"role": "assistant", "content": "USE_LINEAR_AGENT: list issues"}}],
                "usage": {"total_tokens": 12},
            })

        llm = make_llm(handler)
        response = await llm.complete(LLMRequest.chat("system", "list issues", temperature=0.1, max_tokens=2048))

        assert response.content == "USE_LINEAR_AGENT: list issues"
        assert response.error is None
        assert response.usage == {"total_tokens": 12}
        assert seen["url"] == "https://llm.test/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        assert seen["body"]["messages"] == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "list issues"},
        ]
        assert seen["body"]["temperature"] == 0.1
        assert seen["body"]["max_tokens"] == 2048
        assert seen["body"]["model"] == "test-model"

    @pytest.mark.asyncio
    async def test_defaults_applied(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": "hi"}}]})

        llm = make_llm(handler)
        await llm.complete(LLMRequest.chat("s", "u"))

        assert seen["body"]["max_tokens"] == 4096
        assert "temperature" not in seen["body"]

    @pytest.mark.asyncio
    async def test_http_error_returned_not_raised(self):
        llm = make_llm(lambda request: httpx.Response(500, text="upstream down"))

        response = await llm.complete(LLMRequest.chat("s", "u"))

        assert response.content == ""
        assert "500" in response.error

    @pytest.mark.asyncio
    async def test_transport_error_returned_not_raised(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        response = await make_llm(handler).complete(LLMRequest.chat("s", "u"))

        assert response.error is not None

    @pytest.mark.asyncio
    async def test_empty_choices(self):
        llm = make_llm(lambda request: httpx.Response(200, json={"choices": []}))

        response = await llm.complete(LLMRequest.chat("s", "u"))

        assert response.content == ""
        assert response.error is None

    def test_from_settings(self, settings):
        llm = LLMClient.from_settings(settings)

        assert llm.config.api_key == "sk-test"
        assert llm.config.base_url == "https://llm.test/v1"
        assert llm.config.timeout == 5.0


class TestRequestCompletion:
    @pytest.mark.asyncio
    async def test_returns_content(self):
        assert await request_completion(FakeLLM("hello"), LLMRequest.chat("s", "u"), timeout=1) == "hello"

    @pytest.mark.asyncio
    async def test_timeout(self):
        llm = FakeLLM("late", delay=1.0)

        with pytest.raises(LLMTimeout) as exc_info:
            await request_completion(llm, LLMRequest.chat("s", "u"), timeout=0.01)

        assert exc_info.value.timeout == 0.01

    @pytest.mark.asyncio
    async def test_error_response(self):
        llm = FakeLLM(LLMResponse(content="", model="m", provider="p", error="quota exceeded"))

        with pytest.raises(LLMFailure, match="quota exceeded"):
            await request_completion(llm, LLMRequest.chat("s", "u"), timeout=1)

    @pytest.mark.asyncio
    async def test_raised_exception(self):
        llm = FakeLLM(RuntimeError("boom"))

        with pytest.raises(LLMFailure, match="boom"):
            await request_completion(llm, LLMRequest.chat("s", "u"), timeout=1)
