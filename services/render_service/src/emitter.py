import re

from fastapi import Response, status
from fastapi.responses import PlainTextResponse

from .schemas import RenderFailure, RenderOutcome, RenderResult

FAILURE_PREFIX = "PDF render failed: "

# ASCII \w, runs collapse to a single underscore
_UNSAFE_FILENAME_CHARS = re.compile(r"[^\w.-]+", re.ASCII)

def sanitize_filename(title: str) -> str:
    """``song.xml`` -> ``song.xml.pdf``; the source extension is kept."""
    return _UNSAFE_FILENAME_CHARS.sub("_", title) + ".pdf"

def failure_message(failure: RenderFailure) -> str:
    if failure.stage in ("input", "config"):
        return failure.message
    return f"{FAILURE_PREFIX}{failure.stage}: {failure.message}"

def emit_success(outcome: RenderOutcome, title: str) -> Response:
    return Response(
        content=outcome.pdf,
        status_code=status.HTTP_200_OK,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'inline; filename="{sanitize_filename(title)}"',
            "Access-Control-Allow-Origin": "*",
            "X-Transpose-Degraded": "true" if outcome.transpose_degraded else "false",
        },
    )

def emit_failure(failure: RenderFailure) -> Response:
    return PlainTextResponse(failure_message(failure), status_code=failure.status_code)

def emit(result: RenderResult) -> Response:
    if result.outcome is not None:
        return emit_success(result.outcome, result.title)
    if result.failure is None:
        return emit_failure(RenderFailure(stage="render", message="no result produced"))
    return emit_failure(result.failure)
