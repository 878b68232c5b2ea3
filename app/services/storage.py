# app/services/storage.py
import logging
from pathlib import Path
from typing import Optional

from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import BlobServiceClient, ContentSettings

logger = logging.getLogger(__name__)


class BlobNotFound(Exception):
    pass


class BlobStore:
    """Where uploaded profile documents live. ``save`` returns a public URL."""

    def save(self, name: str, data: bytes, content_type: Optional[str] = None) -> str:
        raise NotImplementedError

    def read(self, name: str) -> bytes:
        raise NotImplementedError

    def delete(self, name: str) -> None:
        raise NotImplementedError

    def exists(self, name: str) -> bool:
        raise NotImplementedError


class LocalBlobStore(BlobStore):
    def __init__(self, directory: str, url_prefix: str = "/uploads"):
        self.directory = Path(directory).resolve()
        self.directory.mkdir(parents=True, exist_ok=True)
        self.url_prefix = url_prefix.rstrip("/")

    def _path(self, name: str) -> Path:
        path = (self.directory / name).resolve()
        # blob names are generated server-side, but never escape the upload dir
        if path.parent != self.directory:
            raise BlobNotFound(name)
        return path

    def save(self, name: str, data: bytes, content_type: Optional[str] = None) -> str:
        self._path(name).write_bytes(data)
        return f"{self.url_prefix}/{name}"

    def read(self, name: str) -> bytes:
        path = self._path(name)
        if not path.is_file():
            raise BlobNotFound(name)
        return path.read_bytes()

    def delete(self, name: str) -> None:
        path = self._path(name)
        if path.is_file():
            path.unlink()
            logger.info("Deleted file from disk: %s", path)

    def exists(self, name: str) -> bool:
        try:
            return self._path(name).is_file()
        except BlobNotFound:
            return False


class AzureBlobStore(BlobStore):
    def __init__(self, connection_string: str, container: str):
        if not connection_string:
            raise RuntimeError("AZURE_STORAGE_CONNECTION_STRING is missing")
        if not container:
            raise RuntimeError("AZURE_CONTAINER_NAME is missing (Blob 컨테이너 이름을 넣어야 함)")

        self.container = container
        self.client = BlobServiceClient.from_connection_string(connection_string)
        try:
            self.client.create_container(container)
        except ResourceExistsError:
            pass

    def _blob(self, name: str):
        return self.client.get_blob_client(container=self.container, blob=name)

    def save(self, name: str, data: bytes, content_type: Optional[str] = None) -> str:
        blob_client = self._blob(name)
        content_settings = ContentSettings(content_type=content_type) if content_type else None
        blob_client.upload_blob(data, overwrite=True, content_settings=content_settings)
        return blob_client.url

    def read(self, name: str) -> bytes:
        try:
            return self._blob(name).download_blob().readall()
        except ResourceNotFoundError:
            raise BlobNotFound(name)

    def delete(self, name: str) -> None:
        try:
            self._blob(name).delete_blob()
        except ResourceNotFoundError:
            pass

    def exists(self, name: str) -> bool:
        return self._blob(name).exists()


def build_blob_store(settings) -> BlobStore:
    if settings.STORAGE_BACKEND == "azure":
        return AzureBlobStore(settings.AZURE_STORAGE_CONNECTION_STRING, settings.AZURE_CONTAINER_NAME)
    return LocalBlobStore(settings.UPLOAD_DIR)
