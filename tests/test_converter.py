"""Tests for conversion argument construction and subprocess invocation."""

import subprocess
import sys
from unittest.mock import Mock

import pytest

from image_conversion_service import SUPPORTED_FORMATS, ConversionError, ConversionInvoker, UnsupportedFormatError, build_arguments


@pytest.mark.parametrize("output_format", SUPPORTED_FORMATS)
def test_arguments_are_deterministic(output_format):
    """Building arguments twice for the same input yields the same sequence."""
    first = build_arguments("/ws/in.jpg", f"/ws/out.{output_format}", output_format)
    second = build_arguments("/ws/in.jpg", f"/ws/out.{output_format}", output_format)

    assert first == second
    assert first[:5] == ["/ws/in.jpg", "-quality", "75", "-strip", "-auto-orient"]
    assert first[-1] == f"/ws/out.{output_format}"


def test_format_specific_arguments():
    """Each format appends its own defines between the common flags and the output."""
    assert build_arguments("in", "out", "avif")[5:-1] == [
        "-define", "heic:speed=8", "-define", "heic:preserve-orientation=true",
    ]
    assert build_arguments("in", "out", "webp")[5:-1] == [
        "-define", "webp:lossless=false", "-define", "webp:method=6",
    ]
    assert build_arguments("in", "out", "png")[5:-1] == [
        "-define", "png:compression-level=9", "-define", "png:compression-strategy=2",
    ]
    assert build_arguments("in", "out", "jpg") == build_arguments("in", "out", "jpeg")
    assert build_arguments("in", "out", "jpg")[5:-1] == []


@pytest.mark.parametrize("output_format", ["bmp", "gif", "", "PNG", "avif "])
def test_unsupported_format_never_spawns(output_format, tmp_path):
    """Unknown formats are rejected before the tool is started."""
    runner = Mock()
    invoker = ConversionInvoker(runner=runner)

    with pytest.raises(UnsupportedFormatError) as excinfo:
        invoker.convert(tmp_path / "in.jpg", tmp_path / "out", output_format)

    runner.assert_not_called()
    assert "unsupported output format" in str(excinfo.value)
    assert not (tmp_path / "out").exists()


def test_convert_runs_binary_with_merged_output(tmp_path):
    """The runner receives the full command with stderr folded into stdout."""
    runner = Mock(return_value=subprocess.CompletedProcess([], 0, stdout=b""))
    invoker = ConversionInvoker(binary="magick-convert", runner=runner)

    result = invoker.convert(tmp_path / "in.png", tmp_path / "out.webp", "webp")

    assert result == tmp_path / "out.webp"
    command = runner.call_args.args[0]
    assert command[0] == "magick-convert"
    assert command[1:] == build_arguments(tmp_path / "in.png", tmp_path / "out.webp", "webp")
    assert runner.call_args.kwargs["stdout"] == subprocess.PIPE
    assert runner.call_args.kwargs["stderr"] == subprocess.STDOUT


def test_nonzero_exit_carries_output(tmp_path):
    """A failing tool produces a ConversionError with its output verbatim."""
    runner = Mock(return_value=subprocess.CompletedProcess([], 1, stdout=b"convert: improper image header\n"))
    invoker = ConversionInvoker(runner=runner)

    with pytest.raises(ConversionError) as excinfo:
        invoker.convert(tmp_path / "in.jpg", tmp_path / "out.avif", "avif")

    assert excinfo.value.returncode == 1
    assert excinfo.value.output == "convert: improper image header\n"
    assert "improper image header" in str(excinfo.value)
    assert "exit status 1" in str(excinfo.value)


def test_missing_binary_is_conversion_error(tmp_path):
    """A binary that cannot be started is reported as a conversion failure."""
    invoker = ConversionInvoker(binary=str(tmp_path / "does-not-exist"))
    (tmp_path / "in.jpg").write_bytes(b"data")

    with pytest.raises(ConversionError) as excinfo:
        invoker.convert(tmp_path / "in.jpg", tmp_path / "out.png", "png")

    assert "failed to start" in str(excinfo.value)


@pytest.mark.skipif(sys.platform == "win32", reason="shell script stand-ins need a POSIX shell")
def test_real_subprocess_success(tmp_path, fake_convert):
    """The default runner executes the tool and the output file appears."""
    (tmp_path / "in.jpg").write_bytes(b"jpeg-bytes")
    invoker = ConversionInvoker(binary=str(fake_convert))

    result = invoker.convert(tmp_path / "in.jpg", tmp_path / "out.png", "png")

    assert result.read_bytes() == b"jpeg-bytes"


@pytest.mark.skipif(sys.platform == "win32", reason="shell script stand-ins need a POSIX shell")
def test_real_subprocess_failure_captures_stderr(tmp_path, failing_convert):
    """stderr of the real process ends up in the error."""
    (tmp_path / "in.jpg").write_bytes(b"garbage")
    invoker = ConversionInvoker(binary=str(failing_convert))

    with pytest.raises(ConversionError) as excinfo:
        invoker.convert(tmp_path / "in.jpg", tmp_path / "out.avif", "avif")

    assert "no decode delegate" in excinfo.value.output


def test_unsupported_format_error_is_a_conversion_error():
    """The format only appears in the message; there is no exit status or output."""
    error = UnsupportedFormatError("bmp")

    assert isinstance(error, ConversionError)
    assert error.status_code == 500
    assert error.detail() == "Error processing image: unsupported output format: bmp"
    assert error.returncode is None
    assert error.output == ""
    assert vars(error) == {"returncode": None, "output": ""}
