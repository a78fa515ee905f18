import io
import zipfile

import pytest

from services.render_service.src.config import Settings
from services.render_service.src.exceptions import FetchError

SCORE_XML = b'<?xml version="1.0" encoding="UTF-8"?><score-partwise version="4.0"><part-list/></score-partwise>'
FAKE_PDF = b"%PDF-1.4\n%fake score\n%%EOF"

def _page_state(**overrides):
    state = {"ready": True, "transposed": False, "transposeError": None, "error": None}
    state.update(overrides)
    return state

class FakeStore:
    def __init__(self, objects=None, error=None):
        self.objects = dict(objects or {})
        self.error = error
        self.calls = []

    def get(self, bucket, key):
        self.calls.append((bucket, key))
        if self.error is not None:
            raise self.error
        if key not in self.objects:
            raise FetchError(f"object {key} not found in bucket {bucket}")
        return self.objects[key]

class FakeHandle:
    """Stands in for a browser page; ``ready=False`` never raises the completion flag."""

    def __init__(self, *, ready=True, page_state=None, pdf=FAKE_PDF, fail_on=None, close_error=None):
        self.ready = ready
        self.page_state = _page_state() if page_state is None else page_state
        self.pdf = pdf
        self.fail_on = fail_on
        self.close_error = close_error
        self.loaded = []
        self.waits = []
        self.captured_options = None
        self.close_calls = 0

    def load(self, html):
        self.loaded.append(html)
        if self.fail_on == "load":
            raise RuntimeError("net::ERR_NAME_NOT_RESOLVED")

    def wait_for_condition(self, expression, timeout_s):
        self.waits.append((expression, timeout_s))
        if not self.ready:
            raise TimeoutError(f"condition not met within {timeout_s:g}s")

    def evaluate(self, expression):
        return self.page_state

    def capture_pdf(self, options):
        self.captured_options = options
        if self.fail_on == "capture":
            raise RuntimeError("Printing failed")
        return self.pdf

    def close(self):
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error

class FakeEngine:
    def __init__(self, handle=None, launch_error=None):
        self.handle = handle if handle is not None else FakeHandle()
        self.launch_error = launch_error
        self.launches = 0

    def launch(self):
        self.launches += 1
        if self.launch_error is not None:
            raise self.launch_error
        return self.handle

def _make_mxl(entries):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries:
            zf.writestr(name, data)
    return buf.getvalue()

@pytest.fixture
def make_mxl():
    return _make_mxl

@pytest.fixture
def page_state():
    return _page_state

@pytest.fixture
def fake_handle_cls():
    return FakeHandle

@pytest.fixture
def fake_engine_cls():
    return FakeEngine

@pytest.fixture
def fake_store_cls():
    return FakeStore

@pytest.fixture
def cfg():
    return Settings(score_bucket="scores-bucket", render_timeout_s=30.0)
