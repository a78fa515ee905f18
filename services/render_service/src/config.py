from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional

OSMD_SCRIPT_URL = "https://cdn.jsdelivr.net/npm/opensheetmusicdisplay@1.8.8/build/opensheetmusicdisplay.min.js"

class Settings(BaseSettings):

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    service_name: str = "score-render-service"
    environment: str = "local"
    google_cloud_project: Optional[str] = None
    score_bucket: Optional[str] = None

    # Rendering environment
    render_timeout_s: float = 30.0
    viewport_width: int = 1200
    viewport_height: int = 1600
    osmd_script_url: str = OSMD_SCRIPT_URL

    # PDF snapshot
    pdf_format: str = "Letter"
    pdf_margin: str = "12mm"

    # Chromium
    chromium_executable_path: Optional[str] = None
    chromium_args: List[str] = ["--no-sandbox", "--disable-dev-shm-usage"]
    chromium_headless: bool = True

    # Tracing
    use_cloud_trace: bool = False

settings = Settings() # type: ignore
