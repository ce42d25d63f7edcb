"""FastAPI application factory for the alt text service."""

import inspect
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .cors import cors_headers
from .exceptions import ProcessingError
from .models import ErrorResponse, HealthResponse
from .processor import BaseProcessor, StatelessAction

logger = logging.getLogger(__name__)

INVALID_REQUEST_MESSAGE = "Invalid request body"


@dataclass
class ServiceConfig:
    """
    Configuration for building the service application.

    Args:
        name: Override service name (defaults to processor.name)
        version: Override service version (defaults to processor.version)
        description: Short description for generated docs
        allowed_origins: Origins allowed to call CORS-enabled actions
    """

    name: str | None = None
    version: str | None = None
    description: str | None = None
    allowed_origins: list[str] = field(default_factory=list)


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
    )


def create_app(processor: BaseProcessor, config: ServiceConfig | None = None) -> FastAPI:
    """
    Create a FastAPI application for a processor.

    Args:
        processor: The processor instance implementing business logic
        config: Optional service configuration
    """

    config = config or ServiceConfig()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    service_name = config.name or processor.name
    service_version = config.version or processor.version
    service_description = config.description or f"{service_name} API"

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s %s", service_name, service_version)
        yield
        logger.info("Shutting down %s", service_name)
        await processor.aclose()

    app = FastAPI(
        title=f"{service_name.title()} API",
        description=service_description,
        version=service_version,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    app.state.processor = processor
    app.state.service_config = config

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle malformed request bodies."""
        logger.warning("Rejected request to %s: %s", request.url.path, exc.errors())
        return _error_response(400, INVALID_REQUEST_MESSAGE, str(exc))

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        """Handle Pydantic validation errors raised inside handlers."""
        return _error_response(400, INVALID_REQUEST_MESSAGE, str(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Unknown routes and unsupported methods are both reported as 404."""
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not Found", status_code=404)
        if exc.status_code == 400:
            return _error_response(400, INVALID_REQUEST_MESSAGE, str(exc.detail))
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(ProcessingError)
    async def processing_exception_handler(request: Request, exc: ProcessingError):
        """Request-level failures abort the whole request with a plain-text 500."""
        logger.error("Error processing request to %s: %s", request.url.path, exc)
        message = str(exc) or "Unknown error"
        return PlainTextResponse(f"Error processing request: {message}", status_code=500)

    @app.get("/", response_model=HealthResponse)
    async def root():
        return HealthResponse(status="healthy", version=service_version)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(status="healthy", version=service_version)

    actions = processor.get_stateless_actions()
    if not actions:
        logger.warning(
            "Processor %s registered but get_stateless_actions() returned nothing.",
            processor.name,
        )

    cors_routes: dict[str, set[str]] = {}

    def make_endpoint(action: StatelessAction):
        RequestModel = action.request_model

        if RequestModel is not None:
            async def endpoint(payload: RequestModel):
                call_result = action.handler(payload)

                if inspect.isawaitable(call_result):
                    call_result = await call_result
                return call_result
        else:
            async def endpoint():
                call_result = action.handler()

                if inspect.isawaitable(call_result):
                    call_result = await call_result
                return call_result

        return endpoint

    for action in actions:
        logger.info("Registering action '%s' at %s", action.name, action.path)

        endpoint = make_endpoint(action)

        route_kwargs = {
            "methods": list(action.methods),
            "response_model": action.response_model,
            "summary": action.summary,
            "description": action.description,
            "tags": list(action.tags) if action.tags else None,
            "responses": {400: {"model": ErrorResponse}},
        }
        route_kwargs = {k: v for k, v in route_kwargs.items() if v is not None}

        app.api_route(action.path, **route_kwargs)(endpoint)

        if action.cors:
            cors_routes.setdefault(action.path, set()).update(m.upper() for m in action.methods)

    if cors_routes:
        @app.middleware("http")
        async def cors_middleware(request: Request, call_next):
            methods = cors_routes.get(request.url.path)
            if methods is None:
                return await call_next(request)

            headers = cors_headers(request.headers.get("origin"), config.allowed_origins)
            if request.method == "OPTIONS":
                return Response(status_code=200, headers=headers)

            response = await call_next(request)
            if request.method in methods:
                response.headers.update(headers)
            return response

    return app
