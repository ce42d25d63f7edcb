"""Prompt construction and the client for the captioning model."""

import logging
from abc import ABC, abstractmethod

import httpx

from .exceptions import InferenceError
from .models import PageContext

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """\
You are an expert in assistive technology. You will analyze the image and generate an alt text description for the image no longer than a sentence or two.

Guidelines:
    - Use simple present tense (e.g., "Cat sits on sofa" not "Cat is sitting on sofa")
    - Remain objective and factual
{relevance_guideline}
Consider:
    1. The subject(s) in detail
    2. The setting
    3. The actions or interactions
    4. Other relevant information
{context_step}
Avoid:
    - Unnecessary details
    - Subjective interpretations
    - Redundant information
    - Focusing on other features apart from the subject in detail
    - Using 'is' and 'are'
{context_block}
Provide only the alt text description, without additional commentary.
"""

CONTEXT_BLOCK = """
Use the following site data for context:
    URL: {url}
    Title: {title}
    Description: {description}
"""


def build_prompt(context: PageContext | None = None) -> str:
    """
    Build the captioning prompt.

    The site data section is only included when context carries something.
    """
    if context is None or context.is_empty:
        return PROMPT_TEMPLATE.format(
            relevance_guideline="",
            context_step="",
            context_block="",
        )

    return PROMPT_TEMPLATE.format(
        relevance_guideline="    - Maintain relevance to the page content\n",
        context_step="    5. Take into consideration the site data for better context\n",
        context_block=CONTEXT_BLOCK.format(
            url=context.url,
            title=context.title,
            description=context.description,
        ),
    )


class InferenceClient(ABC):
    """Turns image bytes plus a prompt into descriptive text."""

    @abstractmethod
    async def describe(self, image: bytes, prompt: str, max_tokens: int | None = None) -> str:
        """
        Return the model's description of image.

        Raises:
            InferenceError: If the service rejects the request or returns nothing usable.
        """


class WorkersAIClient(InferenceClient):
    """
    Client for the Cloudflare Workers AI REST API.

    Usage:
        client = WorkersAIClient(account_id="...", api_token="...", http_client=httpx.AsyncClient())
        text = await client.describe(image_bytes, build_prompt(context), max_tokens=35)
    """

    def __init__(
        self,
        account_id: str,
        api_token: str,
        http_client: httpx.AsyncClient,
        model: str = "@cf/llava-hf/llava-1.5-7b-hf",
        base_url: str = "https://api.cloudflare.com/client/v4",
        timeout: float = 45.0,
    ):
        """
        Initialize the client.

        Args:
            account_id: Cloudflare account identifier
            api_token: API token with Workers AI permissions
            http_client: Shared async HTTP client
            model: Model identifier to run
            base_url: Base URL of the Cloudflare API
            timeout: Timeout for a single inference call in seconds
        """
        self.account_id = account_id
        self.api_token = api_token
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = http_client

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/accounts/{self.account_id}/ai/run/{self.model}"

    async def describe(self, image: bytes, prompt: str, max_tokens: int | None = None) -> str:
        payload = {"image": list(image), "prompt": prompt}
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        try:
            response = await self._client.post(
                self.endpoint,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_token}"},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            raise InferenceError("Inference request timed out") from exc
        except httpx.HTTPError as exc:
            raise InferenceError(f"Inference request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        if response.status_code != 200 or not body.get("success", False):
            errors = body.get("errors") or []
            detail = "; ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in errors
                if err
            )
            logger.error(
                "Inference service returned %s: %s",
                response.status_code,
                detail or response.text,
            )
            raise InferenceError(detail or f"Inference service returned {response.status_code}")

        result = body.get("result")
        description = result.get("description") if isinstance(result, dict) else None
        if not isinstance(description, str):
            raise InferenceError("Inference response did not include a description")
        return description
