"""Uploaded report files kept in a Supabase Storage bucket."""
import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import Optional

from supabase import create_client, Client

from models.document import DocumentPayload
from services.errors import ConfigurationError, StorageError
from config import SUPABASE_URL, SUPABASE_KEY, STORAGE_BUCKET

logger = logging.getLogger(__name__)


@dataclass
class StoredFile:
    """Where an uploaded file was written."""
    path: str
    url: str


def object_path_for(owner_id: str, file_name: str, timestamp_ms: int) -> str:
    """Build the bucket path of an owner's upload: users/{owner}/reports/{name}_{ms}."""
    safe_name = re.sub(r"[^A-Za-z0-9_.-]+", "_", file_name).strip("_") or "report"
    return f"users/{owner_id}/reports/{safe_name}_{timestamp_ms}"


class FileStorage:
    """Upload, download, and remove report files."""

    def __init__(
        self,
        supabase_url: Optional[str] = SUPABASE_URL,
        supabase_key: Optional[str] = SUPABASE_KEY,
        bucket: str = STORAGE_BUCKET,
        client: Optional[Client] = None
    ):
        self.supabase_url = supabase_url
        self.supabase_key = supabase_key
        self.bucket = bucket
        self._client = client
        self._lock = threading.Lock()

    @property
    def client(self) -> Client:
        """
        Supabase client, created on first access.

        Raises:
            ConfigurationError: If Supabase credentials are missing
        """
        if self._client is None:
            with self._lock:
                if self._client is None:
                    if not self.supabase_url or not self.supabase_key:
                        raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY environment variables are required")
                    self._client = create_client(self.supabase_url, self.supabase_key)
                    logger.info(f"Initialized FileStorage with bucket: {self.bucket}")
        return self._client

    def upload(self, owner_id: str, file_name: str, payload: DocumentPayload) -> StoredFile:
        """
        Write an uploaded document to the bucket under the owner's prefix.

        Returns:
            StoredFile with the object path and its public URL

        Raises:
            StorageError: If the upload fails
        """
        path = object_path_for(owner_id, file_name, int(time.time() * 1000))
        bucket = self.client.storage.from_(self.bucket)

        try:
            bucket.upload(path=path, file=payload.data, file_options={"content-type": payload.mime_type})
            url = bucket.get_public_url(path)
        except Exception as e:
            error_msg = f"Failed to upload {file_name}: {str(e)}"
            logger.error(error_msg)
            raise StorageError(error_msg) from e

        logger.info(f"Uploaded {len(payload.data)} bytes to {path}")
        return StoredFile(path=path, url=url)

    def download(self, path: str) -> bytes:
        """
        Read a stored file.

        Raises:
            StorageError: If the download fails
        """
        try:
            return self.client.storage.from_(self.bucket).download(path)
        except Exception as e:
            error_msg = f"Failed to download {path}: {str(e)}"
            logger.error(error_msg)
            raise StorageError(error_msg) from e

    def delete(self, path: str) -> None:
        """
        Remove a stored file.

        Raises:
            StorageError: If the removal fails
        """
        try:
            self.client.storage.from_(self.bucket).remove([path])
        except Exception as e:
            error_msg = f"Failed to remove {path}: {str(e)}"
            logger.error(error_msg)
            raise StorageError(error_msg) from e

        logger.info(f"Removed stored file {path}")
