"""Deliver converted images, either inline or through object storage."""

import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError

from .config import Settings
from .errors import PublishError
from .models import InlineResult, StoredObject
from .storage import S3Storage
from .workspace import StagedFiles

logger = logging.getLogger(__name__)


def media_type_for(output_format: str) -> str:
    return f"image/{output_format}"


def _read_output(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise PublishError(f"failed to open file: {exc}") from exc


class Publisher(ABC):
    """Hook point for result delivery. Blocking; callers offload to a thread."""

    mode: str

    @abstractmethod
    def publish(self, staged: StagedFiles, output_format: str) -> InlineResult | StoredObject:
        """Publish ``staged.output_path`` and describe where the result is."""


class InlinePublisher(Publisher):
    """Return the converted bytes in the response body."""

    mode = "inline"

    def publish(self, staged: StagedFiles, output_format: str) -> InlineResult:
        content = _read_output(staged.output_path)
        return InlineResult(
            content=content,
            media_type=media_type_for(output_format),
            filename=staged.download_name,
        )


class StoragePublisher(Publisher):
    """Upload the converted file under a random key and return its public URL.

    The key keeps the extension of the uploaded file, not the converted one.
    """

    mode = "storage"

    def __init__(self, storage: S3Storage):
        self.storage = storage

    def publish(self, staged: StagedFiles, output_format: str) -> StoredObject:
        body = _read_output(staged.output_path)
        key = f"{uuid.uuid4()}{staged.source_suffix}"
        try:
            self.storage.put_object(key, body, content_type=media_type_for(output_format))
        except (BotoCoreError, ClientError) as exc:
            raise PublishError(f"failed to upload file: {exc}") from exc

        return StoredObject(
            bucket=self.storage.bucket,
            key=key,
            region=self.storage.region,
            url=self.storage.public_url(key),
        )


def make_publisher(settings: Settings) -> Publisher:
    """Build the publisher for the configured delivery mode."""
    if settings.publish_mode == "storage":
        return StoragePublisher(S3Storage.from_settings(settings))
    return InlinePublisher()
