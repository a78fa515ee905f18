"""Pull the MusicXML markup out of a stored score.

Plain ``.xml``/``.musicxml`` objects pass through untouched. ``.mxl`` objects
are zip containers; the markup entry is picked by name, first ``.musicxml``
then ``.xml``, in the archive's own listing order.
"""
import io
import re
import zipfile
import zlib
from typing import List, Optional, Tuple

from .exceptions import ExtractionError
from .schemas import DEFAULT_TITLE, FormatTag, NotationPayload, SourceDocument

PREFERRED_ENTRY = re.compile(r"\.musicxml$", re.IGNORECASE)
FALLBACK_ENTRY = re.compile(r"\.xml$", re.IGNORECASE)

NO_PAYLOAD_MESSAGE = "MXL file contains no MusicXML."

def select_entry(names: List[str]) -> Optional[str]:
    """First preferred match wins; the fallback pattern is only tried when none match."""
    for pattern in (PREFERRED_ENTRY, FALLBACK_ENTRY):
        for name in names:
            if pattern.search(name):
                return name
    return None

def _extract_from_container(data: bytes) -> Tuple[str, bytes]:
    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            names = [info.filename for info in archive.infolist() if not info.is_dir()]
            entry = select_entry(names)
            if entry is None:
                raise ExtractionError(NO_PAYLOAD_MESSAGE)
            return entry, archive.read(entry)
    except zipfile.BadZipFile as e:
        raise ExtractionError(f"invalid MXL container: {e}") from e
    except (zipfile.LargeZipFile, NotImplementedError, RuntimeError, zlib.error, EOFError) as e:
        # unsupported compression, encrypted, corrupt or truncated entries
        raise ExtractionError(f"unreadable MXL entry: {e}") from e

def extract(data: bytes, format_tag: FormatTag, title: str = DEFAULT_TITLE) -> NotationPayload:
    if format_tag is FormatTag.PLAIN:
        return NotationPayload(data=data, title=title)
    entry, markup = _extract_from_container(data)
    return NotationPayload(data=markup, title=title, entry_name=entry)

def extract_source(source: SourceDocument, title: str = DEFAULT_TITLE) -> NotationPayload:
    return extract(source.data, source.format_tag, title)
