"""Failures raised while producing captions."""


class FetchError(Exception):
    """An outbound fetch failed or returned a non-success status."""

    def __init__(self, message: str, url: str, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ImageFetchError(FetchError):
    """An image could not be downloaded. Scoped to a single image."""


class PageFetchError(FetchError):
    """The source page could not be downloaded. Aborts the whole request."""


class InferenceError(Exception):
    """The inference service rejected the request or returned no description."""


class ProcessingError(Exception):
    """A request-level failure that aborts the request before fan-out."""
