"""Alt text generation: per-image captioning fanned out over a batch."""

import asyncio
import logging
from typing import List, Sequence

import httpx
from fastapi import HTTPException

from .config import Settings, settings as default_settings
from .direct import fetch_bytes
from .exceptions import ImageFetchError, InferenceError, PageFetchError, ProcessingError
from .inference import InferenceClient, WorkersAIClient, build_prompt
from .models import AggregateError, CaptionRequest, CaptionResponse, CaptionResult, PageContext
from .page_context import PageContextParser, fetch_page_context, get_parser
from .processor import BaseProcessor, StatelessAction

logger = logging.getLogger(__name__)

INFERENCE_FAILED_MESSAGE = "AI inference failed"
UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


def describe_failure(exc: BaseException) -> str:
    """Map a per-image failure to the message reported for that image."""
    if isinstance(exc, InferenceError):
        return INFERENCE_FAILED_MESSAGE
    if isinstance(exc, ImageFetchError):
        return f"Failed to fetch image from {exc.url}"
    return str(exc) or UNKNOWN_ERROR_MESSAGE


def aggregate_error(results: Sequence[CaptionResult]) -> AggregateError | None:
    """Return the batch-level error flag if any result failed."""
    if any(result.error is not None for result in results):
        return AggregateError()
    return None


class CaptionAggregator:
    """
    Captions a batch of images concurrently.

    Every image is handled by its own task. A task always resolves to a
    CaptionResult: failures are caught inside the task and recorded on that
    image's result, so one image can never abort its siblings.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        inference: InferenceClient,
        max_tokens: int | None = None,
        task_timeout: float | None = None,
    ):
        self._client = http_client
        self.inference = inference
        self.max_tokens = max_tokens
        self.task_timeout = task_timeout

    async def process(self, images: Sequence[str], context: PageContext | None = None) -> List[CaptionResult]:
        """Caption every image, returning one result per image in input order."""
        context = context or PageContext()
        prompt = build_prompt(context)
        return list(await asyncio.gather(*(self._process_one(image, prompt) for image in images)))

    async def _process_one(self, image: str, prompt: str) -> CaptionResult:
        try:
            caption = await asyncio.wait_for(self._caption(image, prompt), timeout=self.task_timeout)
        except asyncio.TimeoutError:
            logger.error("Timed out captioning %s after %ss", image, self.task_timeout)
            return CaptionResult(
                image=image,
                caption="",
                error=f"Timed out after {self.task_timeout:g} seconds",
            )
        except Exception as exc:
            logger.error("Failed to caption %s: %s", image, exc)
            return CaptionResult(image=image, caption="", error=describe_failure(exc))

        return CaptionResult(image=image, caption=caption, error=None)

    async def _caption(self, image: str, prompt: str) -> str:
        image_bytes = await fetch_bytes(self._client, image, ImageFetchError)
        description = await self.inference.describe(image_bytes, prompt, max_tokens=self.max_tokens)
        caption = description.lstrip()
        if not caption:
            raise InferenceError(f"Empty description returned for {image}")
        return caption


class AltTextProcessor(BaseProcessor):
    """Processor exposing the alt text generation action."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        inference: InferenceClient | None = None,
        parser: PageContextParser | None = None,
    ):
        self.settings = settings or default_settings
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=self.settings.fetch_timeout,
            headers={"User-Agent": self.settings.user_agent},
        )

        if inference is None:
            if not self.settings.cloudflare_account_id or not self.settings.cloudflare_api_token:
                logger.warning(
                    "Cloudflare credentials are not configured; inference calls will fail."
                )
            inference = WorkersAIClient(
                account_id=self.settings.cloudflare_account_id,
                api_token=self.settings.cloudflare_api_token,
                http_client=self._client,
                model=self.settings.caption_model,
                base_url=self.settings.workers_ai_base_url,
                timeout=self.settings.inference_timeout,
            )

        self.parser = parser or get_parser(self.settings.page_parser)
        self.aggregator = CaptionAggregator(
            http_client=self._client,
            inference=inference,
            max_tokens=self.settings.max_tokens,
            task_timeout=self.settings.task_timeout,
        )

    @property
    def name(self) -> str:
        return "alt-text"

    @property
    def version(self) -> str:
        return self.settings.api_version

    def get_stateless_actions(self) -> List[StatelessAction]:
        return [
            StatelessAction(
                name="generate_alt_text",
                path="/generate-alt-text",
                request_model=CaptionRequest,
                response_model=CaptionResponse,
                handler=self.handle_generate_alt_text,
                summary="Generate alt text for a batch of images.",
                description=(
                    "Fetches each image, grounds the caption with the title and description "
                    "of the source page, and returns one result per image. Individual image "
                    "failures are reported per result and do not fail the request."
                ),
                tags=("captioning",),
            ),
        ]

    async def handle_generate_alt_text(self, payload: CaptionRequest) -> CaptionResponse:
        """Caption every image in the payload."""

        if self.settings.require_site_url and not payload.site_url:
            raise HTTPException(status_code=400, detail="siteUrl is required")

        try:
            context = PageContext()
            if payload.site_url:
                context = await fetch_page_context(self._client, payload.site_url, self.parser)
        except PageFetchError as exc:
            raise ProcessingError(str(exc)) from exc
        except Exception as exc:
            logger.exception("Unexpected error preparing page context for %s", payload.site_url)
            raise ProcessingError(str(exc)) from exc

        try:
            results = await self.aggregator.process(payload.images, context)
            error = aggregate_error(results)
            if error:
                failed = sum(1 for result in results if result.error is not None)
                logger.warning("%d of %d images failed", failed, len(results))
            return CaptionResponse(data=results, error=error)
        except Exception as exc:
            logger.exception("Unexpected error captioning %d images", len(payload.images))
            raise ProcessingError(str(exc)) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
