"""Shared doubles for the alt text service tests."""

import asyncio

import httpx
from fastapi.testclient import TestClient

from alt_text_service import AltTextProcessor, ServiceConfig, Settings, create_app
from alt_text_service.inference import InferenceClient

SITE_URL = "https://shelter.example.com/adopt"
CAT_URL = "https://images.example.com/cat.png"
DOG_URL = "https://images.example.com/dog.jpg"
BIRD_URL = "https://images.example.com/bird.gif"
MISSING_URL = "https://images.example.com/missing.png"

PAGE_HTML = """
<html>
  <head>
    <title>Pet Adoption</title>
    <meta name="description" content="Adopt a rescued cat or dog today">
  </head>
  <body><img src="cat.png"></body>
</html>
"""

ALLOWED_ORIGINS = ["https://localhost:5173", "https://magic-alt-plugin.pages.dev"]


def image_bytes(url: str) -> bytes:
    return f"bytes:{url}".encode()


def default_routes() -> dict:
    return {
        SITE_URL: httpx.Response(200, text=PAGE_HTML),
        CAT_URL: httpx.Response(200, content=image_bytes(CAT_URL)),
        DOG_URL: httpx.Response(200, content=image_bytes(DOG_URL)),
        BIRD_URL: httpx.Response(200, content=image_bytes(BIRD_URL)),
        MISSING_URL: httpx.Response(404, text="Not Found"),
    }


def make_http_client(routes: dict, requested: list | None = None) -> httpx.AsyncClient:
    """
    Build an AsyncClient answering from routes.

    A route value may be an httpx.Response or an httpx exception class, which
    is raised for that URL. Every requested URL is appended to requested.
    """
    if requested is None:
        requested = []

    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        requested.append(url)
        route = routes.get(url)
        if route is None:
            return httpx.Response(404)
        if isinstance(route, type) and issubclass(route, Exception):
            raise route("unreachable", request=request)
        return route

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class FakeInference(InferenceClient):
    """Inference double returning canned descriptions keyed by image bytes."""

    def __init__(self, descriptions: dict | None = None, default: str = "  Cat sits on a sofa", delays: dict | None = None):
        self.descriptions = descriptions or {}
        self.default = default
        self.delays = delays or {}
        self.calls = []

    async def describe(self, image: bytes, prompt: str, max_tokens: int | None = None) -> str:
        self.calls.append({"image": image, "prompt": prompt, "max_tokens": max_tokens})
        delay = self.delays.get(image)
        if delay:
            await asyncio.sleep(delay)
        outcome = self.descriptions.get(image, self.default)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def make_settings(**overrides) -> Settings:
    values = {
        "allowed_origins": ALLOWED_ORIGINS,
        "require_site_url": True,
        "task_timeout": 5.0,
        "cloudflare_account_id": "test-account",
        "cloudflare_api_token": "test-token",
    }
    values.update(overrides)
    return Settings(**values)


def make_test_client(
    routes: dict | None = None,
    inference: InferenceClient | None = None,
    requested: list | None = None,
    parser=None,
    **setting_overrides,
) -> TestClient:
    settings = make_settings(**setting_overrides)
    processor = AltTextProcessor(
        settings,
        http_client=make_http_client(default_routes() if routes is None else routes, requested),
        inference=inference or FakeInference(),
        parser=parser,
    )
    app = create_app(processor, ServiceConfig(allowed_origins=settings.allowed_origins))
    return TestClient(app)
