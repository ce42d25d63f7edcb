"""Request and response models for the alt text service."""

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, AnyHttpUrl, field_validator

AGGREGATE_ERROR_MESSAGE = "Failed to process some images"

_url_adapter = TypeAdapter(AnyHttpUrl)


def _check_url(value: str) -> str:
    """Validate that value is an http(s) URL and return it unchanged."""
    _url_adapter.validate_python(value)
    return value


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    version: str = Field(default="1.0.0")


class ErrorResponse(BaseModel):
    """Error response envelope."""

    error: str = Field(..., description="High-level error message")
    detail: str | None = Field(None, description="Additional context for debugging")


class CaptionRequest(BaseModel):
    """Incoming payload listing the images to caption."""

    model_config = ConfigDict(populate_by_name=True)

    images: list[str] = Field(
        ...,
        min_length=1,
        description="Image URLs to caption, in the order results should be returned.",
    )
    site_url: str | None = Field(
        None,
        alias="siteUrl",
        description="Page the images appear on, used as context for the captions.",
    )

    @field_validator("images")
    @classmethod
    def validate_images(cls, value: list[str]) -> list[str]:
        return [_check_url(image) for image in value]

    @field_validator("site_url")
    @classmethod
    def validate_site_url(cls, value: str | None) -> str | None:
        if value is None:
            return value
        return _check_url(value)


class PageContext(BaseModel):
    """Metadata scraped from the page that hosts the images."""

    model_config = ConfigDict(frozen=True)

    url: str = ""
    title: str = ""
    description: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.url or self.title or self.description)


class CaptionResult(BaseModel):
    """Caption outcome for a single image."""

    image: str = Field(..., description="The image URL, echoed verbatim.")
    caption: str = Field("", description="Generated alt text; empty on failure.")
    error: str | None = Field(None, description="Why the image failed, or null on success.")


class AggregateError(BaseModel):
    """Advisory flag raised when any image in the batch failed."""

    message: str = AGGREGATE_ERROR_MESSAGE


class CaptionResponse(BaseModel):
    """Response payload pairing every requested image with its caption."""

    data: list[CaptionResult]
    error: AggregateError | None = None
