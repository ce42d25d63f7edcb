"""Base processor interface for the alt text microservice."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List

from pydantic import BaseModel


@dataclass
class StatelessAction:
    """
    Definition of an HTTP route backed by a processor method.

    Attributes:
        name: Short identifier used for logging and OpenAPI docs.
        path: FastAPI route path (e.g., "/generate-alt-text").
        handler: Callable invoked with the validated payload.
        request_model: Pydantic model for request validation.
        response_model: Optional Pydantic model for response serialization.
        methods: HTTP methods to expose (defaults to POST).
        summary: Optional OpenAPI summary.
        description: Optional longer description.
        tags: Optional OpenAPI tags.
        cors: Whether the route answers CORS preflight and carries CORS headers.
    """

    name: str
    path: str
    handler: Callable[[BaseModel], Awaitable[Any] | Any]
    request_model: type[BaseModel] | None = None
    response_model: type[BaseModel] | None = None
    methods: tuple[str, ...] = ("POST",)
    summary: str | None = None
    description: str | None = None
    tags: tuple[str, ...] | None = None
    cors: bool = True


class BaseProcessor(ABC):
    """Hook point for request/response microservices."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Processor/service name used for logging and metadata."""

    @property
    def version(self) -> str:
        """Optional semantic version string."""
        return "1.0.0"

    def get_stateless_actions(self) -> List[StatelessAction]:
        """
        Return the list of actions provided by this processor.

        Override in subclasses to expose endpoints.
        """
        return []

    async def aclose(self) -> None:
        """Release resources held by the processor. Called on app shutdown."""
