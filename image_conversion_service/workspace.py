"""Scratch workspace shared by all requests, plus the gate serializing conversions."""

import logging
import shutil
import tempfile
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import Any, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class StagedFiles:
    """Input/output pair for a single request inside the workspace."""

    input_path: Path
    output_path: Path
    download_name: str
    source_suffix: str = ""
    _removed: bool = field(default=False, init=False, repr=False)

    def remove(self) -> None:
        """Delete both files. Missing files are ignored; other failures are only logged."""
        if self._removed:
            return
        self._removed = True
        for path in (self.input_path, self.output_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Failed to remove staged file %s: %s", path, exc)


class Workspace:
    """
    Process-lifetime scratch directory.

    The directory itself is created once and only removed on shutdown; requests
    create and delete individual files inside it. Save+convert work is run
    through ``with_exclusive_access`` which admits one caller at a time.

    Args:
        prefix: Prefix for the generated directory name
        base_dir: Parent directory (defaults to the system temp dir)
    """

    def __init__(self, prefix: str = "image-conversion", base_dir: str | None = None):
        # mkdtemp failures propagate: the service cannot run without a workspace
        self.root = Path(tempfile.mkdtemp(prefix=prefix, dir=base_dir))
        self._gate = threading.Semaphore(1)
        logger.info("Created workspace %s", self.root)

    def join(self, name: str) -> Path:
        return self.root / name

    def stage(self, filename: str, output_format: str) -> StagedFiles:
        """Allocate distinct input and output paths for one upload."""
        base = PurePath(filename.replace("\\", "/")).name or "upload"
        stem = PurePath(base).stem or "upload"
        token = uuid.uuid4().hex
        return StagedFiles(
            input_path=self.join(f"{token}-in-{base}"),
            output_path=self.join(f"{token}-{stem}.{output_format}"),
            download_name=f"{stem}.{output_format}",
            source_suffix=PurePath(base).suffix,
        )

    def with_exclusive_access(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run ``fn`` while holding the workspace gate."""
        with self._gate:
            return fn(*args, **kwargs)

    def remove(self) -> None:
        """Best-effort removal of the whole workspace directory."""
        shutil.rmtree(self.root, ignore_errors=True)
        logger.info("Removed workspace %s", self.root)
