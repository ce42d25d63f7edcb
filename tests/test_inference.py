"""Tests for prompt construction and the Workers AI client."""

import asyncio
import json

import httpx
import pytest

from alt_text_service.exceptions import InferenceError
from alt_text_service.inference import WorkersAIClient, build_prompt
from alt_text_service.models import PageContext

ENDPOINT = "https://api.cloudflare.com/client/v4/accounts/acct/ai/run/@cf/llava-hf/llava-1.5-7b-hf"


def test_prompt_includes_style_rules():
    prompt = build_prompt()

    assert "simple present tense" in prompt
    assert "Remain objective and factual" in prompt
    assert "Subjective interpretations" in prompt
    assert "Using 'is' and 'are'" in prompt
    assert "without additional commentary" in prompt
    assert "site data" not in prompt


def test_prompt_includes_context():
    context = PageContext(url="https://shelter.example.com", title="Shelter", description="Adopt")

    prompt = build_prompt(context)

    assert "URL: https://shelter.example.com" in prompt
    assert "Title: Shelter" in prompt
    assert "Description: Adopt" in prompt
    assert "Maintain relevance to the page content" in prompt


def test_empty_context_matches_no_context():
    assert build_prompt(PageContext()) == build_prompt(None)


def describe_with(handler, max_tokens=35):
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            client = WorkersAIClient(account_id="acct", api_token="secret", http_client=http_client)
            return await client.describe(b"\x00\x01\xff", "Describe", max_tokens=max_tokens)

    return asyncio.run(_run())


def test_describe_success():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "result": {"description": " A cat"}})

    assert describe_with(handler) == " A cat"
    assert seen["url"] == ENDPOINT
    assert seen["auth"] == "Bearer secret"
    assert seen["body"] == {"image": [0, 1, 255], "prompt": "Describe", "max_tokens": 35}


def test_describe_omits_max_tokens_when_unset():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "result": {"description": "A cat"}})

    describe_with(handler, max_tokens=None)

    assert "max_tokens" not in seen["body"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(400, json={"success": False, "errors": [{"code": 3010, "message": "Invalid image"}]}),
        httpx.Response(200, json={"success": False, "errors": []}),
        httpx.Response(200, json={"success": True, "result": {}}),
        httpx.Response(502, text="<html>Bad gateway</html>"),
        httpx.Response(200, json={"success": True, "result": "A cat"}),
    ],
)
def test_describe_failures_raise_inference_error(response):
    with pytest.raises(InferenceError):
        describe_with(lambda request: response)


def test_describe_error_message_from_service():
    response = httpx.Response(400, json={"success": False, "errors": [{"message": "Invalid image"}]})

    with pytest.raises(InferenceError, match="Invalid image"):
        describe_with(lambda request: response)


def test_describe_timeout_raises_inference_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    with pytest.raises(InferenceError):
        describe_with(handler)


def test_describe_transport_error_raises_inference_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(InferenceError, match="connection refused"):
        describe_with(handler)
