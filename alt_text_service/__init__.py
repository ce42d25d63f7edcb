"""Alt text generation microservice built on FastAPI."""

from .processor import BaseProcessor, StatelessAction
from .api import create_app, ServiceConfig
from .config import Settings, settings
from .direct import fetch_bytes, fetch_text, run_blocking
from .captioning import AltTextProcessor, CaptionAggregator, aggregate_error
from .inference import InferenceClient, WorkersAIClient, build_prompt
from .models import CaptionRequest, CaptionResponse, CaptionResult, PageContext
from .page_context import (
    PageContextParser,
    RegexPageContextParser,
    SoupPageContextParser,
    fetch_page_context,
)

__version__ = "1.0.0"


__all__ = [
    "BaseProcessor",
    "StatelessAction",
    "create_app",
    "ServiceConfig",
    "Settings",
    "settings",
    "fetch_bytes",
    "fetch_text",
    "run_blocking",
    "AltTextProcessor",
    "CaptionAggregator",
    "aggregate_error",
    "InferenceClient",
    "WorkersAIClient",
    "build_prompt",
    "CaptionRequest",
    "CaptionResponse",
    "CaptionResult",
    "PageContext",
    "PageContextParser",
    "RegexPageContextParser",
    "SoupPageContextParser",
    "fetch_page_context",
]
