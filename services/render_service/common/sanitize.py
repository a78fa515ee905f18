# common/sanitize.py
import hashlib
from typing import Any

from pydantic import BaseModel

SAFE_KEYS = {
    "bucket", "key", "title", "transpose", "format_tag", "stage",
    "entry_name", "transpose_degraded", "state_var", "url", "method",
}
# Score payloads and generated pages are large and not useful in logs
SENSITIVE_KEYS = {
    "authorization", "token", "headers", "data", "html", "pdf", "body",
}

def hash_preview(s: str, n: int = 12) -> str:
    if not isinstance(s, str):
        s = str(s)
    return f"sha256={hashlib.sha256(s.encode('utf-8')).hexdigest()[:n]},len={len(s)}"

def sanitize_value(key: str, value: Any) -> Any:
    k = (key or "").lower()
    if k in SAFE_KEYS and isinstance(value, (str, int, float, bool, type(None))):
        return value
    if isinstance(value, (bytes, bytearray)):
        return f"bytes:{len(value)}"
    if k in SENSITIVE_KEYS:
        return hash_preview(str(value))
    if isinstance(value, str):
        return value if len(value) <= 120 else hash_preview(value)
    if isinstance(value, (int, float, bool)) or value is None:
        return value
    if isinstance(value, BaseModel):
        return {f: sanitize_value(f, getattr(value, f)) for f in type(value).model_fields}
    if isinstance(value, dict):
        return {k: sanitize_value(k, v) for k, v in value.items()}
    if isinstance(value, list):
        return [sanitize_value("", v) for v in value]
    return value.__class__.__name__
