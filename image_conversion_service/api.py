"""FastAPI application factory for the image conversion service."""

import inspect
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings as default_settings
from .converter import ConversionInvoker
from .errors import ServiceError
from .models import HealthResponse
from .pipeline import ConversionPipeline
from .processor import BaseProcessor, ImageConvertProcessor, StatelessAction
from .publisher import Publisher, make_publisher
from .workspace import Workspace

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    workspace: Workspace | None = None,
    invoker: ConversionInvoker | None = None,
    publisher: Publisher | None = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    The workspace is created here, so a failure to create the scratch
    directory aborts startup.

    Args:
        settings: Service settings (defaults to the environment-loaded settings)
        workspace: Pre-built workspace, mainly for tests
        invoker: Conversion invoker override
        publisher: Result publisher override (defaults to the configured mode)
    """

    settings = settings or default_settings

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    workspace = workspace or Workspace(settings.workspace_prefix, settings.workspace_base_dir)
    invoker = invoker or ConversionInvoker(settings.convert_binary)
    publisher = publisher or make_publisher(settings)
    pipeline = ConversionPipeline(workspace, invoker, publisher)
    processor = ImageConvertProcessor(pipeline, settings.max_upload_size, settings.service_version)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Serving %s in %s mode", processor.name, publisher.mode)
        yield
        workspace.remove()

    app = FastAPI(
        title=f"{settings.service_name.title()} API",
        description="Converts uploaded images with ImageMagick and returns or stores the result.",
        version=processor.version,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.workspace = workspace
    app.state.processor = processor

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return PlainTextResponse(exc.detail(), status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Keep framework errors (405, 404) in the same plain-text shape."""
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)

    @app.get("/", response_model=HealthResponse)
    async def root():
        return HealthResponse(status="healthy", version=processor.version, mode=publisher.mode)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(status="healthy", version=processor.version, mode=publisher.mode)

    register_actions(app, processor)
    return app


def register_actions(app: FastAPI, processor: BaseProcessor) -> None:
    """Mount every action of ``processor`` on ``app``."""

    actions = processor.get_stateless_actions()
    if not actions:
        logger.warning(
            "Processor %s registered but get_stateless_actions() returned nothing.",
            processor.name,
        )

    def make_endpoint(action: StatelessAction):
        async def endpoint(request: Request):
            call_result = action.handler(request)

            if inspect.isawaitable(call_result):
                call_result = await call_result
            return call_result

        return endpoint

    for action in actions:
        logger.info("Registering action '%s' at %s", action.name, action.path)

        route_kwargs = {
            "methods": list(action.methods),
            "summary": action.summary,
            "description": action.description,
            "tags": list(action.tags) if action.tags else None,
            "response_class": Response,
        }
        route_kwargs = {k: v for k, v in route_kwargs.items() if v is not None}

        app.api_route(action.path, **route_kwargs)(make_endpoint(action))
