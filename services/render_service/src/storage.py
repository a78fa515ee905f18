import os
from typing import Optional, Protocol

from google.api_core import exceptions as gax_exceptions
from google.cloud import storage

from .exceptions import FetchError

PROJECT_ID = os.getenv("GOOGLE_CLOUD_PROJECT")

class ObjectStore(Protocol):
    def get(self, bucket: str, key: str) -> bytes: ...

class GcsObjectStore:
    """Reads score objects from Cloud Storage.

    A client is built per read unless one is injected; requests share no
    connection state.
    """

    def __init__(self, project: Optional[str] = None, client: Optional[storage.Client] = None) -> None:
        self._project = project or PROJECT_ID
        self._client = client

    def _storage(self) -> storage.Client:
        if self._client is not None:
            return self._client
        return storage.Client(project=self._project) if self._project else storage.Client()

    def get(self, bucket: str, key: str) -> bytes:
        if not bucket or not key:
            raise ValueError("Invalid bucket or blob name")
        blob = self._storage().bucket(bucket).blob(key)
        try:
            return blob.download_as_bytes()
        except gax_exceptions.NotFound as e:
            raise FetchError(f"object {key} not found in bucket {bucket}") from e
        except gax_exceptions.GoogleAPIError as e:
            raise FetchError(f"gcs download: {e}") from e

def get_object_store() -> ObjectStore:
    from .config import settings
    return GcsObjectStore(project=settings.google_cloud_project)
