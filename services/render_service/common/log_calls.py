# common/log_calls.py
import inspect
import time
from functools import wraps
from typing import Any, Callable, Dict

from ..src.logging import jlog
from .context import get_context
from .sanitize import sanitize_value

CALL_LOGGER_ENABLED = True

def _bind_args(func: Callable, *args, **kwargs) -> Dict[str, Any]:
    sig = inspect.signature(func)
    bound = sig.bind_partial(*args, **kwargs)
    bound.apply_defaults()
    return dict(bound.arguments)

def log_calls(name: str | None = None):
    """
    Structured call logger for pipeline stages.
    - Logs start/end/error with sanitized args and duration_ms.
    - Injects correlation_id/object key from contextvars.
    """
    def decorator(func: Callable):
        func_name = name or func.__name__

        @wraps(func)
        def wrapper(*args, **kwargs):
            if not CALL_LOGGER_ENABLED:
                return func(*args, **kwargs)

            start = time.time()
            argmap = _bind_args(func, *args, **kwargs)
            san_args = {k: sanitize_value(k, v) for k, v in argmap.items()}
            cid, key = get_context()
            jlog(event="call_start", fn=func_name, args=san_args, correlation_id=cid, key=key)

            try:
                result = func(*args, **kwargs)
                dur = int((time.time() - start) * 1000)
                jlog(event="call_end", fn=func_name, duration_ms=dur, ret=sanitize_value("return", result),
                     correlation_id=cid, key=key)
                return result
            except Exception as e:
                dur = int((time.time() - start) * 1000)
                jlog(event="call_error", fn=func_name, duration_ms=dur, error=str(e),
                     correlation_id=cid, key=key, severity="ERROR")
                raise

        return wrapper
    return decorator
