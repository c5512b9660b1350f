"""Invoke the external ImageMagick ``convert`` command for a requested output format."""

import logging
import subprocess
from pathlib import Path
from typing import Callable

from .errors import ConversionError, UnsupportedFormatError

logger = logging.getLogger(__name__)

QUALITY = "75"

BASE_ARGUMENTS: tuple[str, ...] = ("-quality", QUALITY, "-strip", "-auto-orient")

FORMAT_ARGUMENTS: dict[str, tuple[str, ...]] = {
    "avif": ("-define", "heic:speed=8", "-define", "heic:preserve-orientation=true"),
    "webp": ("-define", "webp:lossless=false", "-define", "webp:method=6"),
    "jpg": (),
    "jpeg": (),
    "png": ("-define", "png:compression-level=9", "-define", "png:compression-strategy=2"),
}

SUPPORTED_FORMATS: tuple[str, ...] = tuple(FORMAT_ARGUMENTS)


def build_arguments(input_path: str | Path, output_path: str | Path, output_format: str) -> list[str]:
    """
    Build the argument list for converting ``input_path`` to ``output_path``.

    Raises:
        UnsupportedFormatError: If ``output_format`` is not in SUPPORTED_FORMATS
    """
    try:
        extra = FORMAT_ARGUMENTS[output_format]
    except KeyError:
        raise UnsupportedFormatError(output_format) from None
    return [str(input_path), *BASE_ARGUMENTS, *extra, str(output_path)]


class ConversionInvoker:
    """
    Runs the conversion tool as a subprocess.

    Args:
        binary: Executable name or path (defaults to ImageMagick's ``convert``)
        runner: ``subprocess.run`` compatible callable, replaceable in tests
    """

    def __init__(self, binary: str = "convert", runner: Callable[..., subprocess.CompletedProcess] = subprocess.run):
        self.binary = binary
        self._runner = runner

    def command(self, input_path: str | Path, output_path: str | Path, output_format: str) -> list[str]:
        return [self.binary, *build_arguments(input_path, output_path, output_format)]

    def convert(self, input_path: str | Path, output_path: str | Path, output_format: str) -> Path:
        """
        Convert ``input_path`` into ``output_path``.

        The produced file is not inspected; a zero exit status is taken as success.

        Returns:
            Path of the converted file

        Raises:
            ConversionError: If the format is unsupported, the tool cannot be
                started, or it exits with a non-zero status
        """
        command = self.command(input_path, output_path, output_format)
        logger.info("Running %s", " ".join(command))

        try:
            completed = self._runner(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as exc:
            logger.error("Failed to start %s: %s", self.binary, exc)
            raise ConversionError(f"failed to start {self.binary}: {exc}") from exc

        output = (completed.stdout or b"").decode("utf-8", errors="replace")
        if completed.returncode != 0:
            logger.error("Conversion of %s exited with %s: %s", input_path, completed.returncode, output)
            raise ConversionError(
                f"conversion failed: exit status {completed.returncode}, output: {output}",
                returncode=completed.returncode,
                output=output,
            )
        return Path(output_path)
