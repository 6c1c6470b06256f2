"""PromptForge — FastAPI Application.

This module defines the application factory, all REST API routes, and the
``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Configuration** is a frozen :class:`~promptforge.core.config.PromptForgeConfig`
  built once in :func:`main` and passed to :func:`create_app`.
- **Generation** is performed by :class:`~promptforge.core.pipeline.GenerationPipeline`,
  which enhances the prompt, calls the image backend, and stores the result.
  The pipeline is assembled in the application lifespan and kept on
  ``app.state.pipeline``.
- **Persistence** is a flat directory of ``<id>.png`` / ``<id>.json`` pairs;
  no database required.
- **Errors** derive from :class:`~promptforge.core.errors.PromptForgeError`
  and are mapped to a status code and a JSON body by a single handler.

Endpoints
---------
========  ================================  ================================
Method    Path                              Purpose
========  ================================  ================================
POST      ``/api/images/generate``          Enhance, generate, and store
GET       ``/api/images/``                  List all images, newest first
GET       ``/api/images/{id}``              Raw PNG bytes
GET       ``/api/images/{id}/download``     PNG as a named attachment
GET       ``/api/config``                   Providers, sizes, qualities
GET       ``/api/health``                   Liveness check
========  ================================  ================================

Usage
-----
CLI (installed entry point)::

    promptforge

Direct invocation::

    python -m promptforge.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.concurrency import run_in_threadpool

from promptforge import __version__
from promptforge.api.models import (
    ErrorResponse,
    GalleryResponse,
    GenerateRequest,
    GenerateResponse,
    ImageRecordOut,
)
from promptforge.core.config import PromptForgeConfig
from promptforge.core.enhancer import PromptEnhancer
from promptforge.core.errors import InvalidRequestError, PromptForgeError
from promptforge.core.models import GenerationRequest, ImageQuality, ImageSize
from promptforge.core.pipeline import GenerationPipeline, download_filename
from promptforge.core.store import ImageStore
from promptforge.providers import (
    chat_clients,
    create_chat_client,
    create_image_client,
    image_clients,
)

logger = logging.getLogger(__name__)


def build_pipeline(config: PromptForgeConfig) -> GenerationPipeline:
    """Assemble the generation pipeline selected by *config*."""
    store = ImageStore(
        config.storage_dir,
        max_redirects=config.download_max_redirects,
        timeout=config.download_timeout,
    )
    enhancer = PromptEnhancer(create_chat_client(config))
    return GenerationPipeline(enhancer, create_image_client(config), store)


def get_pipeline(request: Request) -> GenerationPipeline:
    return request.app.state.pipeline


# ---------------------------------------------------------------------------
# Image routes.
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/api/images", tags=["images"])


@router.post("/generate", response_model=GenerateResponse)
async def generate_image(
    payload: GenerateRequest,
    pipeline: GenerationPipeline = Depends(get_pipeline),
) -> GenerateResponse:
    """Enhance the prompt, generate an image, and store it.

    Missing ``size`` and ``quality`` default to ``1024x1024`` and
    ``standard``.  The pipeline makes blocking network calls, so it runs in
    the threadpool.

    Raises:
        InvalidRequestError: 400 for a missing or empty prompt, or an
            unsupported size or quality.
        GenerationError: 500 if the image backend fails.
        StorageError: 500 if the image cannot be downloaded or stored.
    """
    if not payload.prompt:
        raise InvalidRequestError("Prompt is required")

    request = GenerationRequest(
        prompt=payload.prompt,
        size=payload.size,
        quality=payload.quality,
    )
    result = await run_in_threadpool(pipeline.generate, request)

    return GenerateResponse(id=result.image_id, url=result.url, prompt=result.prompt)


@router.get("", response_model=GalleryResponse, include_in_schema=False)
@router.get("/", response_model=GalleryResponse)
async def list_images(pipeline: GenerationPipeline = Depends(get_pipeline)) -> GalleryResponse:
    """Return every stored image record, newest first."""
    records = pipeline.list_images()
    return GalleryResponse(images=[ImageRecordOut.from_record(r) for r in records])


@router.get("/{image_id}")
async def get_image(
    image_id: str,
    pipeline: GenerationPipeline = Depends(get_pipeline),
) -> FileResponse:
    """Serve the raw image bytes.

    Raises:
        ImageNotFoundError: 404 for an unknown id or a missing image file.
    """
    _, path = pipeline.resolve_image(image_id)
    return FileResponse(path, media_type="image/png")


@router.get("/{image_id}/download")
async def download_image(
    image_id: str,
    pipeline: GenerationPipeline = Depends(get_pipeline),
) -> FileResponse:
    """Serve the image as an attachment named after its prompt.

    Raises:
        ImageNotFoundError: 404 for an unknown id or a missing image file.
    """
    record, path = pipeline.resolve_image(image_id)
    return FileResponse(path, media_type="image/png", filename=download_filename(record))


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    config: PromptForgeConfig | None = None,
    *,
    pipeline: GenerationPipeline | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Application configuration.  Loaded from the environment when
            omitted and no *pipeline* is given.
        pipeline: Pre-built pipeline.  When given, the lifespan does not
            build one from *config* (used by tests).

    Returns:
        The configured FastAPI application.
    """
    if config is None and pipeline is None:
        config = PromptForgeConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # --- Startup -------------------------------------------------------
        owns_pipeline = getattr(app.state, "pipeline", None) is None
        if owns_pipeline:
            app.state.pipeline = build_pipeline(config)
            logger.info(f"Images stored in: {config.storage_dir.resolve()}")
            logger.info(f"Environment: {config.environment}")

        yield  # Application runs here.

        # --- Shutdown ------------------------------------------------------
        if owns_pipeline:
            app.state.pipeline.store.close()
            logger.info("Pipeline closed on shutdown.")

    app = FastAPI(
        title="PromptForge",
        description="Prompt-enhanced AI image generation with a local gallery.",
        version=__version__,
        lifespan=lifespan,
    )
    if pipeline is not None:
        app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PromptForgeError)
    async def handle_promptforge_error(request: Request, exc: PromptForgeError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        body = ErrorResponse(error=exc.title or str(exc), message=str(exc))
        return JSONResponse(status_code=exc.status_code, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        body = ErrorResponse(error="Invalid request", message=str(exc.errors()))
        return JSONResponse(status_code=400, content=body.model_dump())

    @app.get("/api/config")
    async def get_config(request: Request) -> dict:
        """Return the active providers and the supported generation options."""
        active: GenerationPipeline = request.app.state.pipeline
        return {
            "version": __version__,
            "enhancer_provider": active.enhancer.chat_client.provider_name,
            "image_provider": active.image_client.provider_name,
            "available_providers": {
                "chat": chat_clients.list_available(),
                "image": image_clients.list_available(),
            },
            "sizes": [s.value for s in ImageSize],
            "qualities": [q.value for q in ImageQuality],
        }

    @app.get("/api/health")
    async def health() -> dict:
        return {"status": "ok"}

    app.include_router(router)
    return app


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Loads :class:`PromptForgeConfig` from the environment (a missing API key
    for the selected provider aborts startup) and serves the application on
    ``server_host:server_port`` (default ``0.0.0.0:3000``).

    This function is registered as the ``promptforge`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    config = PromptForgeConfig()

    logging.basicConfig(
        level=logging.DEBUG if config.is_development else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Starting PromptForge {__version__} on {config.server_host}:{config.server_port}")

    uvicorn.run(
        create_app(config),
        host=config.server_host,
        port=config.server_port,
    )


if __name__ == "__main__":
    main()
