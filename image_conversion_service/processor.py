"""Processor interface and the image conversion request handler."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List

from fastapi import Request, Response
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from .direct import render_result
from .errors import ClientInputError
from .models import ConversionRequest
from .pipeline import ConversionPipeline

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "avif"
IMAGE_FIELD = "image"


@dataclass
class StatelessAction:
    """
    Definition of an API route backed by a processor method.

    Attributes:
        name: Short identifier used for logging and OpenAPI docs.
        path: FastAPI route path (e.g., "/convert").
        handler: Callable invoked with the incoming request.
        methods: HTTP methods to expose (defaults to POST).
        summary: Optional OpenAPI summary.
        description: Optional longer description.
        tags: Optional OpenAPI tags.
    """

    name: str
    path: str
    handler: Callable[[Request], Awaitable[Any] | Any]
    methods: tuple[str, ...] = ("POST",)
    summary: str | None = None
    description: str | None = None
    tags: tuple[str, ...] | None = None


class BaseProcessor(ABC):
    """Hook point for request/response services."""

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


class ImageConvertProcessor(BaseProcessor):
    """
    Processor exposing upload-and-convert over multipart form data.

    Args:
        pipeline: Conversion pipeline shared by all requests
        max_upload_size: Upload ceiling in bytes
        version: Reported service version
    """

    def __init__(self, pipeline: ConversionPipeline, max_upload_size: int, version: str = "1.0.0"):
        self.pipeline = pipeline
        self.max_upload_size = max_upload_size
        self._version = version

    @property
    def name(self) -> str:
        return "image-convert"

    @property
    def version(self) -> str:
        return self._version

    def get_stateless_actions(self) -> List[StatelessAction]:
        return [
            StatelessAction(
                name="image_convert",
                path="/convert",
                handler=self.handle_convert,
                summary="Convert an uploaded image to avif, webp, jpg, jpeg or png",
                description=(
                    "Accepts multipart/form-data with a file part named 'image'. "
                    "The target format comes from the 'format' query parameter "
                    "(default avif). Returns the converted file or a storage URL, "
                    "depending on the deployment mode."
                ),
                tags=("media",),
            ),
        ]

    async def _read_upload(self, request: Request) -> UploadFile:
        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_upload_size:
            raise ClientInputError(f"upload exceeds {self.max_upload_size} bytes")

        try:
            form = await request.form()
        except (MultiPartException, StarletteHTTPException) as exc:
            logger.warning("Rejected multipart body: %s", exc)
            raise ClientInputError("Failed to parse multipart form") from exc

        upload = form.get(IMAGE_FIELD)
        if not isinstance(upload, UploadFile):
            raise ClientInputError("Failed to get image file")
        if upload.size is not None and upload.size > self.max_upload_size:
            raise ClientInputError(f"upload exceeds {self.max_upload_size} bytes")
        return upload

    async def handle_convert(self, request: Request) -> Response:
        """Convert the uploaded image to the requested format."""
        upload = await self._read_upload(request)
        output_format = request.query_params.get("format") or DEFAULT_FORMAT

        try:
            result = await self.pipeline.run(
                ConversionRequest(
                    source=upload.file,
                    filename=upload.filename or "",
                    output_format=output_format,
                )
            )
        finally:
            await upload.close()
        return render_result(result)
