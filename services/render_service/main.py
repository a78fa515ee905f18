import os

from fastapi import FastAPI

from .src.routers import render
from .src.config import settings
from .src.schemas import HealthResponse
from .otel import init_tracing

app = FastAPI(title="Score Render Service API", version="1.0.0")

app.include_router(render.router, prefix="/api/v1")

os.environ.setdefault("SERVICE_NAME", settings.service_name)
tracer = init_tracing(
    app,
    service_name=settings.service_name,
    service_version="v1",
    use_cloud_trace=settings.use_cloud_trace,
)

@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(service=settings.service_name)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
