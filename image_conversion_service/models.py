"""Lightweight models shared by the conversion pipeline and API."""

from dataclasses import dataclass
from typing import BinaryIO

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    version: str = Field(default="1.0.0")
    mode: str = Field(default="inline", description="Configured result delivery mode")


@dataclass
class ConversionRequest:
    """One upload to convert, built per HTTP request."""

    source: BinaryIO
    filename: str
    output_format: str = "avif"


@dataclass(frozen=True)
class InlineResult:
    """Converted bytes to be returned as an attachment."""

    content: bytes
    media_type: str
    filename: str


@dataclass(frozen=True)
class StoredObject:
    """Reference to a converted image uploaded to object storage."""

    bucket: str
    key: str
    region: str
    url: str
