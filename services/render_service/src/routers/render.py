from typing import Optional

from anyio import to_thread
from fastapi import APIRouter, Depends, Header, Query, Response

from ..dependencies import get_rendering_engine, get_store
from ..emitter import emit
from ..engine import RenderingEngine
from ..logging import jlog
from ..service import render_score
from ..storage import ObjectStore

router = APIRouter()

@router.get(
    "/render",
    response_class=Response,
    summary="Render a stored score to PDF",
    description="Fetch a MusicXML (.xml/.musicxml) or compressed MusicXML (.mxl) object and return it as a paginated PDF.",
    responses={
        200: {"content": {"application/pdf": {}}},
        400: {"content": {"text/plain": {}}},
        500: {"content": {"text/plain": {}}},
    },
)
async def render_pdf(
    key: Optional[str] = Query(default=None, description="Object key of the score in the score bucket"),
    transpose: Optional[str] = Query(default=None, description="Semitones; non-numeric values mean 0"),
    x_correlation_id: Optional[str] = Header(default=None),
    store: ObjectStore = Depends(get_store),
    engine: RenderingEngine = Depends(get_rendering_engine),
) -> Response:
    jlog(event="render_requested", key=key, transpose=transpose, correlation_id=x_correlation_id)
    # Playwright's sync API must stay off the event loop thread
    result = await to_thread.run_sync(render_score, key, transpose, store, engine, x_correlation_id)
    return emit(result)
