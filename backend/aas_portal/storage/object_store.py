"""Local object storage with named buckets and public URLs."""

import asyncio
import logging
from pathlib import Path
from typing import Iterable

from aas_portal.core.errors import StorageError

logger = logging.getLogger(__name__)

BUCKETS = ("profiles", "claims", "posts")


class LocalObjectStorage:
    """
    Object store backed by one directory per bucket.

    Objects are written once (no overwrite) and served read-only from
    ``public_base_url``, which the application mounts over ``root``.
    """

    def __init__(self, root: str, public_base_url: str = "/storage", buckets: Iterable[str] = BUCKETS):
        """
        Initialize LocalObjectStorage.

        Args:
            root: Directory holding one sub-directory per bucket
            public_base_url: URL prefix the root directory is served under
            buckets: Bucket names accepted by ``upload``
        """
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")
        self.buckets = tuple(buckets)

        for bucket in self.buckets:
            (self.root / bucket).mkdir(parents=True, exist_ok=True)

        logger.info(f"Initialized LocalObjectStorage: root={self.root}, buckets={self.buckets}")

    def _object_path(self, bucket: str, key: str) -> Path:
        if bucket not in self.buckets:
            raise StorageError(f"Unknown bucket: {bucket}")
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StorageError(f"Invalid object key: {key!r}")
        return self.root / bucket / key

    def _write(self, target: Path, data: bytes) -> None:
        try:
            with open(target, "xb") as fh:
                fh.write(data)
        except FileExistsError:
            raise StorageError(f"Object already exists: {target.name}")
        except OSError as e:
            raise StorageError(f"Could not write {target.name}: {e}")

    async def upload(self, bucket: str, key: str, data: bytes) -> str:
        """
        Store ``data`` under ``bucket/key``.

        Returns:
            The object path relative to the bucket

        Raises:
            StorageError: unknown bucket, invalid key, existing object or write failure
        """
        target = self._object_path(bucket, key)
        await asyncio.to_thread(self._write, target, data)
        logger.debug(f"Stored {bucket}/{key} ({len(data)} bytes)")
        return key

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.public_base_url}/{bucket}/{path}"

    def exists(self, bucket: str, path: str) -> bool:
        try:
            return self._object_path(bucket, path).is_file()
        except StorageError:
            return False
