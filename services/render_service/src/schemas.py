import math
import re
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TITLE = "Sheet Music"

_LEADING_INT = re.compile(r"^\s*([+-]?)([0-9]+)", re.ASCII)
_MAX_DIGITS = 4300

def coerce_transpose(raw: Any) -> int:
    """Leading-integer parse; anything without one becomes 0."""
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else 0
    m = _LEADING_INT.match(str(raw))
    if not m or len(m.group(2)) > _MAX_DIGITS:
        return 0
    try:
        return int(m.group(1) + m.group(2))
    except ValueError:
        # PYTHONINTMAXSTRDIGITS set below the default
        return 0

def title_from_key(key: str) -> str:
    return key.split("/")[-1] or DEFAULT_TITLE

class FormatTag(str, Enum):
    PLAIN = "plain"
    CONTAINER = "container"

    @classmethod
    def from_key(cls, key: str) -> "FormatTag":
        return cls.CONTAINER if key.lower().endswith(".mxl") else cls.PLAIN

class SourceDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    data: bytes
    format_tag: FormatTag

class NotationPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., description="Plain notation markup, never compressed")
    title: str = DEFAULT_TITLE
    entry_name: Optional[str] = Field(default=None, description="Archive entry the markup came from")

class RenderRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    transpose: int = 0
    title: str = DEFAULT_TITLE

    @field_validator("transpose", mode="before")
    @classmethod
    def _normalize_transpose(cls, v: Any) -> int:
        return coerce_transpose(v)

class RenderDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    html: str
    title: str
    transpose: int
    state_var: str

class RenderOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    pdf: bytes
    transpose_degraded: bool = False
    transpose_error: Optional[str] = None

class RenderFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    stage: str
    message: str
    status_code: int = 500

class RenderResult(BaseModel):
    """Terminal result of one pipeline run: exactly one of outcome/failure."""
    model_config = ConfigDict(frozen=True)

    title: str = DEFAULT_TITLE
    outcome: Optional[RenderOutcome] = None
    failure: Optional[RenderFailure] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not None

class HealthResponse(BaseModel):
    status: str = "ok"
    service: str
