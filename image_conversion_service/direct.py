"""Helpers for running blocking work and rendering pipeline results."""

import asyncio
from typing import Any, Callable
from urllib.parse import quote

from fastapi import Response
from fastapi.responses import PlainTextResponse

from .models import InlineResult, StoredObject


async def run_blocking(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """
    Run a blocking function in a thread pool to avoid blocking the event loop.
    """

    return await asyncio.to_thread(func, *args, **kwargs)


def content_disposition(filename: str) -> str:
    """
    Attachment header for ``filename``.

    The plain ``filename`` parameter is quoted and ASCII only; names that do not
    fit it are also sent as an RFC 5987 ``filename*`` parameter.
    """
    fallback = "".join(c if " " <= c < "\x7f" and c not in '"\\' else "_" for c in filename)
    header = f'attachment; filename="{fallback}"'
    if fallback != filename:
        header += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return header


def render_bytes(payload: bytes | bytearray | memoryview, media_type: str, filename: str | None = None) -> Response:
    """
    Shortcut for returning binary payloads, optionally as a named attachment.
    """

    headers = {"Content-Disposition": content_disposition(filename)} if filename else None
    return Response(content=bytes(payload), media_type=media_type, headers=headers)


def render_result(result: InlineResult | StoredObject) -> Response:
    """Turn a publish result into the HTTP response sent to the caller."""
    if isinstance(result, StoredObject):
        return PlainTextResponse(result.url)
    return render_bytes(result.content, result.media_type, result.filename)


__all__ = ["run_blocking", "content_disposition", "render_bytes", "render_result"]
