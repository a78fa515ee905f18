"""The per-request render pipeline.

fetch -> extract -> build page -> orchestrate. Each stage raises its own
classified error; ``render_score`` is the only place those are caught, and it
turns them into a terminal ``RenderResult``. Nothing is retried.
"""
import time
from typing import Optional

from ..common.context import set_context
from ..common.log_calls import log_calls
from .config import Settings, settings as default_settings
from .document import build_render_document
from .engine import PdfOptions, RenderingEngine
from .exceptions import ConfigError, FetchError, InputError, RenderServiceError
from .extractor import extract_source
from .logging import jlog
from .orchestrator import RenderOrchestrator
from .schemas import (
    FormatTag,
    NotationPayload,
    RenderDocument,
    RenderFailure,
    RenderOutcome,
    RenderRequest,
    RenderResult,
    SourceDocument,
    title_from_key,
)
from .storage import ObjectStore

MISSING_KEY_MESSAGE = "Missing required query parameter: key"
MISSING_BUCKET_MESSAGE = "Missing SCORE_BUCKET environment variable."

def parse_request(key: Optional[str], transpose: Optional[str]) -> RenderRequest:
    if not key:
        raise InputError(MISSING_KEY_MESSAGE)
    return RenderRequest(key=key, transpose=transpose, title=title_from_key(key))

def require_bucket(cfg: Settings) -> str:
    if not cfg.score_bucket:
        raise ConfigError(MISSING_BUCKET_MESSAGE)
    return cfg.score_bucket

@log_calls("fetch_source")
def fetch_source(store: ObjectStore, bucket: str, key: str) -> SourceDocument:
    try:
        data = store.get(bucket, key)
    except FetchError:
        raise
    except Exception as e:
        raise FetchError(str(e) or e.__class__.__name__) from e
    return SourceDocument(key=key, data=data, format_tag=FormatTag.from_key(key))

@log_calls("extract_payload")
def extract_payload(source: SourceDocument, title: str) -> NotationPayload:
    return extract_source(source, title)

@log_calls("build_document")
def build_document(payload: NotationPayload, req: RenderRequest, cfg: Settings) -> RenderDocument:
    return build_render_document(payload, req.transpose, req.title, script_url=cfg.osmd_script_url)

@log_calls("render_document")
def render_document(engine: RenderingEngine, document: RenderDocument, cfg: Settings) -> RenderOutcome:
    orchestrator = RenderOrchestrator(
        engine,
        timeout_s=cfg.render_timeout_s,
        pdf_options=PdfOptions(format=cfg.pdf_format, margin=cfg.pdf_margin),
    )
    return orchestrator.render(document)

def _failed(err: RenderServiceError, title: str) -> RenderResult:
    message = str(err) or err.__class__.__name__
    return RenderResult(
        title=title,
        failure=RenderFailure(stage=err.stage, message=message, status_code=err.status_code),
    )

def render_score(
    key: Optional[str],
    transpose: Optional[str],
    store: ObjectStore,
    engine: RenderingEngine,
    correlation_id: Optional[str] = None,
    cfg: Optional[Settings] = None,
) -> RenderResult:
    cfg = cfg or default_settings
    set_context(correlation_id, key)
    title = title_from_key(key) if key else ""
    start = time.time()

    try:
        req = parse_request(key, transpose)
        bucket = require_bucket(cfg)
        source = fetch_source(store, bucket, req.key)
        payload = extract_payload(source, req.title)
        document = build_document(payload, req, cfg)
        outcome = render_document(engine, document, cfg)
    except RenderServiceError as e:
        jlog(
            event="render_failed",
            severity="WARNING" if e.status_code < 500 else "ERROR",
            stage=e.stage,
            error=str(e),
            correlation_id=correlation_id,
            key=key,
        )
        return _failed(e, title)
    except Exception as e:
        jlog(event="render_failed", severity="ERROR", stage="render", error=str(e), correlation_id=correlation_id, key=key)
        return RenderResult(
            title=title,
            failure=RenderFailure(stage="render", message=str(e) or e.__class__.__name__),
        )

    jlog(
        event="render_ok",
        correlation_id=correlation_id,
        key=key,
        transpose=req.transpose,
        transpose_degraded=outcome.transpose_degraded,
        pdf_bytes=len(outcome.pdf),
        duration_ms=int((time.time() - start) * 1000),
    )
    return RenderResult(title=req.title, outcome=outcome)
