"""Shared fixtures for the image conversion service tests."""

import io
import stat
import subprocess
from pathlib import Path
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from image_conversion_service import (
    ConversionInvoker,
    InlinePublisher,
    S3Storage,
    Settings,
    StoragePublisher,
    Workspace,
    create_app,
)


def _write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def test_settings(tmp_path):
    """Inline-mode settings that ignore the environment's .env file."""
    return Settings(
        _env_file=None,
        publish_mode="inline",
        max_upload_size=64 * 1024,
        workspace_base_dir=str(tmp_path),
    )


@pytest.fixture
def workspace(tmp_path):
    """Workspace rooted under the test's temporary directory."""
    ws = Workspace(prefix="test-ws-", base_dir=str(tmp_path))
    yield ws
    ws.remove()


@pytest.fixture
def fake_convert(tmp_path):
    """Stand-in for ImageMagick: copies the input (first arg) to the output (last arg)."""
    return _write_script(
        tmp_path / "fake-convert",
        'for last; do :; done\ncp "$1" "$last"\n',
    )


@pytest.fixture
def failing_convert(tmp_path):
    """Stand-in for ImageMagick that reports a decode failure."""
    return _write_script(
        tmp_path / "failing-convert",
        'echo "convert: no decode delegate for this image format" >&2\nexit 1\n',
    )


@pytest.fixture
def recording_runner():
    """subprocess.run replacement that records calls and writes the output file."""
    calls = []

    def runner(command, **kwargs):
        calls.append(command)
        Path(command[-1]).write_bytes(b"converted:" + Path(command[1]).read_bytes())
        return subprocess.CompletedProcess(command, 0, stdout=b"")

    runner.calls = calls
    return runner


@pytest.fixture
def mock_s3_client():
    """Mock boto3 S3 client."""
    client = Mock()
    client.put_object = Mock(return_value={"ETag": '"abc"'})
    return client


@pytest.fixture
def s3_storage(mock_s3_client):
    return S3Storage(
        bucket="converted-images",
        region="eu-west-1",
        access_key="key",
        secret_key="secret",
        client=mock_s3_client,
    )


@pytest.fixture
def jpeg_bytes():
    """Small JPEG (around 2KB) built with Pillow."""
    img = Image.new("RGB", (64, 64), color=(200, 40, 40))
    for x in range(0, 64, 4):
        img.putpixel((x, x), (0, 0, 255))
    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=95)
    return buffer.getvalue()


@pytest.fixture
def make_client(test_settings, workspace, fake_convert):
    """Factory building a TestClient around a configurable app."""

    def _make(invoker=None, publisher=None, settings=None):
        app = create_app(
            settings or test_settings,
            workspace=workspace,
            invoker=invoker or ConversionInvoker(str(fake_convert)),
            publisher=publisher or InlinePublisher(),
        )
        return TestClient(app)

    return _make


@pytest.fixture
def storage_publisher(s3_storage):
    return StoragePublisher(s3_storage)
