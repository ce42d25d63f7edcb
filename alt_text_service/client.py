"""Helper script for exercising a running alt text service."""

import argparse
import json
import sys
import urllib.error
import urllib.parse
import urllib.request

DEFAULT_PATH = "/generate-alt-text"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Request alt text for one or more images and print the captions."
    )
    parser.add_argument(
        "images",
        nargs="+",
        help="URLs of the images to caption.",
    )
    parser.add_argument(
        "--site-url",
        help="URL of the page the images appear on, used as caption context.",
    )
    parser.add_argument(
        "--url",
        default=f"http://localhost:8787{DEFAULT_PATH}",
        help="Endpoint URL or base (host:port) for the running service.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the raw JSON response instead of one caption per line.",
    )
    return parser


def resolve_endpoint(url: str) -> str:
    """Append the default action path when url only names the host."""
    parsed = urllib.parse.urlparse(url)
    if parsed.path in ("", "/"):
        parsed = parsed._replace(path=DEFAULT_PATH)
    return urllib.parse.urlunparse(parsed)


def build_payload(images: list[str], site_url: str | None) -> bytes:
    body: dict = {"images": images}
    if site_url:
        body["siteUrl"] = site_url
    return json.dumps(body).encode("utf-8")


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    request = urllib.request.Request(
        resolve_endpoint(args.url),
        data=build_payload(args.images, args.site_url),
        headers={"Content-Type": "application/json"},
    )

    try:
        with urllib.request.urlopen(request) as response:
            body = response.read().decode("utf-8")
    except urllib.error.HTTPError as exc:
        sys.stderr.write(f"Request failed ({exc.code}): {exc.read().decode('utf-8')}\n")
        return 1
    except urllib.error.URLError as exc:
        sys.stderr.write(f"Connection error: {exc.reason}\n")
        return 1

    data = json.loads(body)
    if args.json:
        print(json.dumps(data, indent=2))
    else:
        for result in data["data"]:
            if result.get("error"):
                print(f"{result['image']}\tERROR: {result['error']}")
            else:
                print(f"{result['image']}\t{result['caption']}")

    return 1 if data.get("error") else 0


if __name__ == "__main__":
    raise SystemExit(main())
