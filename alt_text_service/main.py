"""FastAPI entrypoint for the alt text service."""

import uvicorn

from .api import ServiceConfig, create_app
from .captioning import AltTextProcessor
from .config import settings

config = ServiceConfig(
    name=settings.api_title,
    version=settings.api_version,
    description=settings.api_description,
    allowed_origins=settings.allowed_origins,
)

app = create_app(AltTextProcessor(settings), config)


def run():
    """Run the alt text service."""
    uvicorn.run(
        "alt_text_service.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    run()
