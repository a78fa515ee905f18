import time
from enum import Enum
from typing import Any, List, Optional

from .engine import EnvironmentHandle, PdfOptions, RenderingEngine
from .exceptions import RenderError, RenderTimeoutError
from .logging import jlog
from .schemas import RenderDocument, RenderOutcome
from .document import READY_EXPRESSION, STATE_EXPRESSION

RENDER_TIMEOUT_S = 30.0

class RenderState(str, Enum):
    LAUNCHING = "launching"
    LOADING = "loading"
    AWAITING_READY = "awaiting_ready"
    CAPTURING = "capturing"
    DONE = "done"
    TIMED_OUT = "timed_out"
    FAILED = "failed"

TERMINAL_STATES = {RenderState.DONE, RenderState.FAILED}

class RenderOrchestrator:
    """
    Drives one ephemeral rendering environment through
    launch -> load -> wait for ready -> capture, and always closes it.
    A timeout passes through TIMED_OUT on its way to FAILED.
    One instance per render; the handle never escapes ``render``.
    """

    def __init__(
        self,
        engine: RenderingEngine,
        *,
        timeout_s: float = RENDER_TIMEOUT_S,
        pdf_options: Optional[PdfOptions] = None,
    ) -> None:
        self._engine = engine
        self._timeout_s = timeout_s
        self._pdf_options = pdf_options or PdfOptions()
        self.state: Optional[RenderState] = None
        self.history: List[RenderState] = []

    def _enter(self, state: RenderState, **fields: Any) -> None:
        self.state = state
        self.history.append(state)
        jlog(event="render_state", state=state.value, **fields)

    def render(self, document: RenderDocument) -> RenderOutcome:
        handle: Optional[EnvironmentHandle] = None
        start = time.time()
        try:
            self._enter(RenderState.LAUNCHING)
            handle = self._engine.launch()

            self._enter(RenderState.LOADING, html_len=len(document.html))
            handle.load(document.html)

            self._enter(RenderState.AWAITING_READY, timeout_s=self._timeout_s)
            try:
                handle.wait_for_condition(READY_EXPRESSION, self._timeout_s)
            except TimeoutError as e:
                self._enter(RenderState.TIMED_OUT)
                raise RenderTimeoutError(
                    f"score did not finish rendering within {self._timeout_s:g}s"
                ) from e

            page_state = handle.evaluate(STATE_EXPRESSION) or {}
            if page_state.get("error"):
                raise RenderError(f"notation renderer failed: {page_state['error']}")

            self._enter(RenderState.CAPTURING)
            pdf = handle.capture_pdf(self._pdf_options)
            if not pdf:
                raise RenderError("PDF snapshot was empty")

            transpose_error = page_state.get("transposeError")
            degraded = document.transpose != 0 and not page_state.get("transposed", False)
            if degraded:
                jlog(
                    event="transpose_degraded",
                    severity="WARNING",
                    transpose=document.transpose,
                    error=transpose_error,
                )
            self._enter(
                RenderState.DONE,
                pdf_bytes=len(pdf),
                duration_ms=int((time.time() - start) * 1000),
            )
            return RenderOutcome(pdf=pdf, transpose_degraded=degraded, transpose_error=transpose_error)
        except RenderError:
            self._enter(RenderState.FAILED)
            raise
        except Exception as e:
            self._enter(RenderState.FAILED, error=str(e))
            raise RenderError(str(e) or e.__class__.__name__) from e
        finally:
            if handle is not None:
                self._teardown(handle)

    def _teardown(self, handle: EnvironmentHandle) -> None:
        try:
            handle.close()
        except Exception as e:
            jlog(event="render_teardown_failed", severity="WARNING", error=str(e))
