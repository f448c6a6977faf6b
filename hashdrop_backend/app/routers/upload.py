from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ..core.config import Settings
from ..pipeline import UploadPipeline
from ..schemas import HealthOut
from .. import views

logger = logging.getLogger("hashdrop.upload")

router = APIRouter(tags=["upload"])


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pipeline(settings: Settings = Depends(get_settings)) -> UploadPipeline:
    """A fresh pipeline per request; the name map never outlives it."""
    return UploadPipeline(settings)


@router.api_route("/", methods=["GET", "POST"], response_class=HTMLResponse)
async def upload_handler(
    request: Request,
    settings: Settings = Depends(get_settings),
    pipeline: UploadPipeline = Depends(get_pipeline),
):
    """
    GET  -> upload form.
    POST -> stage + hash each file part -> commit by content name, then list
    the stored names with the original names they came from.
    Errors are raised as UploadError and mapped by the app's handlers.
    """
    if request.method == "GET":
        return HTMLResponse(views.render(settings.index_view, settings, None))

    files = await pipeline.run(request)
    logger.info("Upload request finished: %d file(s)", len(files))
    return HTMLResponse(views.render(settings.index_view, settings, files))


@router.get("/healthz", response_model=HealthOut)
def healthz(settings: Settings = Depends(get_settings)):
    # liveness only, does NOT touch the store
    return HealthOut(store_dir=settings.store_dir, tmp_dir=settings.tmp_dir)
