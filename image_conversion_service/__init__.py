"""Image conversion service: upload an image, convert it with ImageMagick, return or store it."""

from .api import create_app
from .config import Settings, settings
from .converter import SUPPORTED_FORMATS, ConversionInvoker, build_arguments
from .direct import render_bytes, render_result, run_blocking
from .errors import ClientInputError, ConversionError, PublishError, ServiceError, UnsupportedFormatError
from .pipeline import ConversionPipeline
from .processor import BaseProcessor, ImageConvertProcessor, StatelessAction
from .publisher import InlinePublisher, StoragePublisher, make_publisher
from .storage import S3Storage
from .workspace import StagedFiles, Workspace

__version__ = "1.0.0"


__all__ = [
    "create_app",
    "Settings",
    "settings",
    "SUPPORTED_FORMATS",
    "ConversionInvoker",
    "build_arguments",
    "run_blocking",
    "render_bytes",
    "render_result",
    "ServiceError",
    "ClientInputError",
    "ConversionError",
    "UnsupportedFormatError",
    "PublishError",
    "ConversionPipeline",
    "BaseProcessor",
    "ImageConvertProcessor",
    "StatelessAction",
    "InlinePublisher",
    "StoragePublisher",
    "make_publisher",
    "S3Storage",
    "StagedFiles",
    "Workspace",
]
