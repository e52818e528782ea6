"""Filesystem implementation of BlobStore.

Layout under the storage root:

    root/
    ├── global/                  # single-tenant mode
    │   ├── 3f2a...c1.webp
    │   └── metadata.json
    └── tenants/
        └── acme/
            ├── 9b7e...04.jpg
            └── metadata.json

There is no locking between processes. Writes go through a temporary
file and ``os.replace`` so concurrent writers of the same key (which
always carry identical bytes) and concurrent readers never see a
partial file.
"""

import logging
import os
import tempfile
from pathlib import Path

from image_cache.config import settings
from image_cache.entities import CacheEntryEntity
from image_cache.errors import StorageError
from image_cache.fingerprint import GLOBAL_NAMESPACE
from image_cache.formats import format_for_extension, resolve_format

logger = logging.getLogger(__name__)

GLOBAL_DIRNAME = "global"
TENANTS_DIRNAME = "tenants"


class FileCacheRepository:
    """Persistent cache storing one file per key.

    This class satisfies the BlobStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, root: str | Path) -> None:
        """Initialize the file cache repository.

        Args:
            root: Storage root directory. Created lazily on first write.
        """
        self._root = Path(root)

    @classmethod
    def create(cls, root: str | Path | None = None) -> "FileCacheRepository":
        """Factory method to create FileCacheRepository with defaults.

        Args:
            root: Storage root. If None, uses settings.

        Returns:
            Configured FileCacheRepository
        """
        return cls(root=root or settings.cache_dir)

    @property
    def root(self) -> Path:
        return self._root

    def namespace_dir(self, namespace: str) -> Path:
        """Directory holding a namespace's entries and metadata."""
        if namespace == GLOBAL_NAMESPACE:
            return self._root / GLOBAL_DIRNAME
        return self._root / TENANTS_DIRNAME / namespace

    def _find(self, namespace: str, key: str) -> Path | None:
        directory = self.namespace_dir(namespace)
        if not directory.is_dir():
            return None
        for path in directory.glob(f"{key}.*"):
            if format_for_extension(path.suffix.lstrip(".")) is not None:
                return path
        return None

    def exists(self, namespace: str, key: str) -> bool:
        return self._find(namespace, key) is not None

    def read(self, namespace: str, key: str) -> CacheEntryEntity:
        path = self._find(namespace, key)
        if path is None:
            raise StorageError("Cache entry not found", details={"namespace": namespace, "key": key})

        fmt = format_for_extension(path.suffix.lstrip("."))
        try:
            data = path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read cache entry: {e}", details={"path": str(path)}) from e

        return CacheEntryEntity(data=data, image_format=fmt.name)

    def write(self, namespace: str, key: str, entry: CacheEntryEntity) -> None:
        fmt = resolve_format(entry.image_format)
        if fmt is None:
            raise StorageError(f"Unknown image format: {entry.image_format}")

        directory = self.namespace_dir(namespace)
        target = directory / f"{key}.{fmt.extension}"

        try:
            directory.mkdir(parents=True, exist_ok=True)
            # Dot-prefixed so lookups by "<key>.*" never match it
            fd, tmp_name = tempfile.mkstemp(prefix=f".{key}.", suffix=".tmp", dir=directory)
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(entry.data)
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write cache entry: {e}", details={"path": str(target)}) from e

        logger.debug(f"[FileCache] Stored {target} ({entry.size_bytes} bytes)")

    def count(self, namespace: str) -> int:
        directory = self.namespace_dir(namespace)
        if not directory.is_dir():
            return 0
        return sum(
            1
            for path in directory.iterdir()
            if not path.name.startswith(".") and format_for_extension(path.suffix.lstrip("."))
        )

    def health_check(self) -> bool:
        """Check if the storage root can be created and written to."""
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            with tempfile.TemporaryFile(dir=self._root):
                pass
            return True
        except OSError:
            return False

    def get_stats(self) -> dict:
        return {
            "root": str(self._root),
            "global_entries": self.count(GLOBAL_NAMESPACE),
        }
