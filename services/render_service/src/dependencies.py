from .config import settings
from .engine import RenderingEngine, engine_from_settings
from .storage import ObjectStore, get_object_store

def get_store() -> ObjectStore:
    return get_object_store()

def get_rendering_engine() -> RenderingEngine:
    return engine_from_settings(settings)
