import contextvars
from typing import Optional

_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("correlation_id", default=None)
_object_key: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("object_key", default=None)

def set_context(correlation_id: Optional[str], object_key: Optional[str]) -> None:
    _correlation_id.set(correlation_id)
    _object_key.set(object_key)

def get_context() -> tuple[Optional[str], Optional[str]]:
    return _correlation_id.get(), _object_key.get()
