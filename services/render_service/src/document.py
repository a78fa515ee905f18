"""Builds the HTML page the headless browser executes.

The page loads OpenSheetMusicDisplay, renders the embedded MusicXML and then
publishes its progress on a single global object::

    window.__SCORE_RENDER__ = {ready, transposed, transposeError, error}

``ready`` flips to ``true`` exactly once, after layout is done or has failed.
The orchestrator waits on it; nothing else in the page is observed.

Transposition is best-effort. OSMD's transpose path throws on some scores, so
a failure there is recorded in ``transposeError`` and the page still finishes,
untransposed or partly transposed. The orchestrator reports that as a
degraded render rather than an error.
"""
import base64
import html

from .config import OSMD_SCRIPT_URL
from .schemas import NotationPayload, RenderDocument

STATE_VAR = "__SCORE_RENDER__"

READY_EXPRESSION = f"() => !!window.{STATE_VAR} && window.{STATE_VAR}.ready === true"
STATE_EXPRESSION = f"() => window.{STATE_VAR}"

_TEMPLATE = """<!doctype html>
<html>
<head>
  <meta charset="utf-8"/>
  <title>{title}</title>
  <style>
    body {{
      margin: 0;
      padding: 12mm;
      background: #ffffff;
      font-family: Arial, sans-serif;
    }}
    #osmd {{
      width: 100%;
    }}
  </style>
</head>
<body>
  <div id="osmd"></div>

  <script>
    window.{state_var} = {{ ready: false, transposed: false, transposeError: null, error: null }};
  </script>
  <script src="{script_url}"></script>
  <script>
    (async function () {{
      const state = window.{state_var};
      try {{
        const bytes = Uint8Array.from(atob("{payload_b64}"), c => c.charCodeAt(0));
        const xml = new TextDecoder("utf-8").decode(bytes);
        const transpose = {transpose};

        const osmd = new opensheetmusicdisplay.OpenSheetMusicDisplay("osmd", {{
          backend: "svg",
          autoResize: false,
          drawTitle: true
        }});

        await osmd.load(xml);
        osmd.Zoom = 1.0;
        osmd.render();

        if (transpose !== 0) {{
          try {{
            if (typeof opensheetmusicdisplay.TransposeCalculator === "function") {{
              osmd.TransposeCalculator = new opensheetmusicdisplay.TransposeCalculator();
            }}
            osmd.Sheet.Transpose = transpose;
            if (typeof osmd.updateGraphic === "function") {{
              osmd.updateGraphic();
            }}
            osmd.render();
            state.transposed = true;
          }} catch (e) {{
            state.transposeError = String((e && e.message) || e);
          }}
        }}
      }} catch (e) {{
        state.error = String((e && e.message) || e);
      }} finally {{
        state.ready = true;
      }}
    }})();
  </script>
</body>
</html>
"""

def build_render_document(
    payload: NotationPayload,
    transpose: int = 0,
    title: str | None = None,
    script_url: str = OSMD_SCRIPT_URL,
) -> RenderDocument:
    title = payload.title if title is None else title
    transpose = int(transpose)
    page = _TEMPLATE.format(
        title=html.escape(title, quote=True),
        state_var=STATE_VAR,
        script_url=html.escape(script_url, quote=True),
        payload_b64=base64.b64encode(payload.data).decode("ascii"),
        transpose=transpose,
    )
    return RenderDocument(html=page, title=title, transpose=transpose, state_var=STATE_VAR)
