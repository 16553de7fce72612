"""Storage in a Google Cloud Storage bucket.

Requires the ``gcs`` extra (google-cloud-storage). Every stored byte is
inverted, so the bucket never holds a file's plain bytes.
"""

import logging
import time
from pathlib import Path
from typing import List, Optional

from google.api_core.exceptions import GoogleAPIError
from google.cloud import storage as gcs

from vhd.errors import StorageError
from vhd.storage.base import ObjectStat, Storage
from vhd.storage.checksum import crc32c, decode_crc32c, negate
from vhd.storage.paths import content_id_to_path, object_names, part_count

logger = logging.getLogger(__name__)

UPLOAD_TIMEOUT = 600
DOWNLOAD_TIMEOUT = 600
UPLOAD_PAUSE = 2


class GoogleCloudStorage(Storage):
    """Blobs as (inverted) objects in a bucket, split into parts."""

    def __init__(
        self,
        bucket: str,
        credentials_file: Optional[Path] = None,
        chunk_size: int = 52428800 * 4,
        client=None,
        upload_pause: float = UPLOAD_PAUSE,
    ):
        """
        Args:
            bucket: Bucket name
            credentials_file: Service account key; when None the client
                uses application default credentials
            chunk_size: Bytes per stored part
            client: Preconfigured ``google.cloud.storage.Client``
            upload_pause: Seconds to wait before finalizing each part
        """
        self.bucket_name = bucket
        self.credentials_file = credentials_file
        self.chunk_size = chunk_size
        self.upload_pause = upload_pause
        self._client = client

    @property
    def name(self) -> str:
        return f"gcs::{self.bucket_name}"

    @property
    def client(self):
        if self._client is None:
            try:
                if self.credentials_file is not None:
                    self._client = gcs.Client.from_service_account_json(str(self.credentials_file))
                else:
                    self._client = gcs.Client()
            except (GoogleAPIError, OSError, ValueError) as e:
                raise StorageError(f"cannot create storage client: {e}") from e
        return self._client

    def _bucket(self):
        return self.client.bucket(self.bucket_name)

    def list_all(self) -> List[str]:
        try:
            return [blob.name for blob in self.client.list_blobs(self.bucket_name)]
        except GoogleAPIError as e:
            raise StorageError(f"cannot list bucket {self.bucket_name}: {e}") from e

    def upload(self, local_path: Path, content_id: str) -> str:
        target = content_id_to_path(content_id)
        try:
            size = Path(local_path).stat().st_size
        except OSError as e:
            raise StorageError(f"cannot read {local_path}: {e}") from e
        count = part_count(size, self.chunk_size)
        logger.info(f"Objects: {count}")

        bucket = self._bucket()
        try:
            with open(local_path, "rb") as src:
                for name in object_names(content_id, str(count)):
                    logger.info(f"Uploading object {name}")
                    data = negate(src.read(self.chunk_size))
                    expected = crc32c(data)
                    blob = bucket.blob(name)
                    blob.upload_from_string(
                        data,
                        content_type="application/octet-stream",
                        timeout=UPLOAD_TIMEOUT,
                    )
                    if self.upload_pause:
                        time.sleep(self.upload_pause)
                    blob.reload()
                    if blob.crc32c is None or decode_crc32c(blob.crc32c) != expected:
                        raise StorageError(
                            f"crc32c of uploaded object {name} different from {expected:08x}"
                        )
        except OSError as e:
            raise StorageError(f"cannot read {local_path}: {e}") from e
        except GoogleAPIError as e:
            raise StorageError(f"cannot upload {target}: {e}") from e
        return str(count)

    def download(self, content_id: str, metadata: str, destination: Path) -> None:
        names = object_names(content_id, metadata)
        logger.info(f"Objects: {len(names)}")
        bucket = self._bucket()
        try:
            with open(destination, "wb") as dest:
                for name in names:
                    logger.info(f"Downloading object {name}")
                    data = bucket.blob(name).download_as_bytes(timeout=DOWNLOAD_TIMEOUT)
                    dest.write(negate(data))
        except (OSError, GoogleAPIError) as e:
            Path(destination).unlink(missing_ok=True)
            raise StorageError(f"cannot fetch {content_id}: {e}") from e

    def remote_stat(self, content_id: str, metadata: str) -> List[ObjectStat]:
        bucket = self._bucket()
        stats = []
        for name in object_names(content_id, metadata):
            try:
                blob = bucket.get_blob(name)
            except GoogleAPIError as e:
                raise StorageError(f"cannot stat {name}: {e}") from e
            if blob is None:
                raise StorageError(f"object {name} not found in {self.bucket_name}")
            checksum = decode_crc32c(blob.crc32c) if blob.crc32c else None
            stats.append(ObjectStat(blob.name, blob.size, checksum))
        return stats
