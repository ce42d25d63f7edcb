"""CORS header computation for an explicit origin allow-list."""

ALLOWED_METHODS = "GET,HEAD,POST,OPTIONS"
ALLOWED_HEADERS = "Content-Type"


def cors_headers(origin: str | None, allowed_origins: list[str]) -> dict[str, str]:
    """
    Return the CORS headers for a request from origin.

    Origins outside the allow-list receive the first allowed origin, so the
    browser rejects the response for them.
    """
    if origin and origin in allowed_origins:
        allow_origin = origin
    else:
        allow_origin = allowed_origins[0] if allowed_origins else ""

    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
    }
