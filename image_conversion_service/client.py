#!/usr/bin/env python3
"""
Command-line client for the image conversion service.

Usage:
    image-convert photo.jpg
    image-convert photo.jpg --format webp --output photo.webp
    image-convert photo.png --url http://converter:8080
"""

import argparse
import mimetypes
import re
import sys
from pathlib import Path
from urllib.parse import unquote

import httpx

DEFAULT_URL = "http://localhost:8080"

_FILENAME_RE = re.compile(r'filename="?([^";]+)"?')
_FILENAME_EXT_RE = re.compile(r"filename\*=UTF-8''([^;\s]+)", re.IGNORECASE)


def _endpoint(url: str) -> str:
    parsed = httpx.URL(url)
    if parsed.path in ("", "/"):
        parsed = parsed.copy_with(path="/convert")
    return str(parsed)


def _attachment_name(response: httpx.Response) -> str | None:
    header = response.headers.get("content-disposition", "")
    extended = _FILENAME_EXT_RE.search(header)
    if extended:
        return Path(unquote(extended.group(1))).name
    match = _FILENAME_RE.search(header)
    return Path(match.group(1)).name if match else None


def convert_file(
    path: Path,
    url: str = DEFAULT_URL,
    output_format: str | None = None,
    transport: httpx.BaseTransport | None = None,
    timeout: float = 120.0,
) -> httpx.Response:
    """Upload ``path`` to the service and return the raw response."""
    params = {"format": output_format} if output_format else None
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    with httpx.Client(transport=transport, timeout=timeout) as client:
        with path.open("rb") as fh:
            return client.post(
                _endpoint(url),
                params=params,
                files={"image": (path.name, fh, content_type)},
            )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Send an image to the conversion service and save the result."
    )
    parser.add_argument("input_image", type=Path, help="Path to the image to convert.")
    parser.add_argument(
        "--format", "-f",
        dest="output_format",
        help="Target format: avif, webp, jpg, jpeg or png (server default: avif).",
    )
    parser.add_argument(
        "--url",
        default=DEFAULT_URL,
        help="Endpoint URL or base (scheme://host:port) of the service (default: %(default)s).",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Where to write the converted file (default: name sent by the server).",
    )
    return parser


def main(argv: list[str] | None = None, transport: httpx.BaseTransport | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        response = convert_file(args.input_image, args.url, args.output_format, transport=transport)
    except httpx.RequestError as exc:
        sys.stderr.write(f"Request failed: {exc}\n")
        return 1

    if response.status_code != 200:
        sys.stderr.write(f"Request failed ({response.status_code}): {response.text}\n")
        return 1

    if response.headers.get("content-type", "").startswith("text/plain"):
        # Storage mode: the body is the object URL
        print(response.text)
        return 0

    output = args.output or Path(_attachment_name(response) or f"{args.input_image.stem}.{args.output_format or 'avif'}")
    output.write_bytes(response.content)
    print(f"Saved converted image to {output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
