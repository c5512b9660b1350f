"""Per-request conversion pipeline: stage, convert under the gate, publish, clean up."""

import logging
import shutil
from pathlib import Path
from typing import BinaryIO

from .converter import ConversionInvoker
from .direct import run_blocking
from .errors import ConversionError
from .models import ConversionRequest, InlineResult, StoredObject
from .publisher import Publisher
from .workspace import StagedFiles, Workspace

logger = logging.getLogger(__name__)


class ConversionPipeline:
    """
    Orchestrates one conversion from uploaded bytes to a published result.

    Only saving and converting happen under the workspace gate; publishing and
    cleanup run outside it. A slow conversion therefore delays every request
    queued behind it, since there is no timeout on the external tool.
    """

    def __init__(self, workspace: Workspace, invoker: ConversionInvoker, publisher: Publisher):
        self.workspace = workspace
        self.invoker = invoker
        self.publisher = publisher

    def save_and_convert(self, source: BinaryIO, staged: StagedFiles, output_format: str) -> Path:
        """Write the upload to the staged input path and run the converter."""
        try:
            with staged.input_path.open("wb") as out:
                shutil.copyfileobj(source, out)
        except OSError as exc:
            raise ConversionError(f"failed to save input file: {exc}") from exc

        return self.invoker.convert(staged.input_path, staged.output_path, output_format)

    async def run(self, request: ConversionRequest) -> InlineResult | StoredObject:
        staged = self.workspace.stage(request.filename, request.output_format)
        logger.info(
            "Converting %s to %s (input %s)",
            request.filename, request.output_format, staged.input_path.name,
        )
        try:
            await run_blocking(
                self.workspace.with_exclusive_access,
                self.save_and_convert,
                request.source,
                staged,
                request.output_format,
            )
            return await run_blocking(self.publisher.publish, staged, request.output_format)
        finally:
            staged.remove()
