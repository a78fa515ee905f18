class RenderServiceError(Exception):
    """Base for every classified pipeline failure.

    ``stage`` names the pipeline step that failed; ``status_code`` is the HTTP
    status the failure surfaces as.
    """
    stage = "render"
    status_code = 500

class InputError(RenderServiceError):
    """Missing or invalid request parameter. Nothing was fetched."""
    stage = "input"
    status_code = 400

class ConfigError(RenderServiceError):
    """Required service configuration is absent."""
    stage = "config"

class FetchError(RenderServiceError):
    """Object store read failed: missing object, permission, transport."""
    stage = "fetch"

class ExtractionError(RenderServiceError):
    """Container has no recognizable notation entry, or is not an archive."""
    stage = "extraction"

class RenderError(RenderServiceError):
    """Anything else that went wrong while driving the rendering environment."""
    stage = "render"

class RenderTimeoutError(RenderError):
    """The page never raised its completion flag within the timeout."""
    pass
