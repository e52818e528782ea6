"""JSON file implementation of MetadataIndex.

Each namespace directory holds a ``metadata.json`` mapping cache keys to
their records. Alongside the primary map a secondary ``url -> [keys]``
index is kept in memory so reverse lookups by source URL do not scan
every record.

Other processes may write the same file. The in-memory view is reloaded
whenever the file's modification time changes; concurrent writers can
still lose each other's updates, which only costs a later cache miss.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from threading import Lock

from image_cache.entities import MetadataRecordEntity
from image_cache.errors import StorageError
from image_cache.repositories.file_repository import FileCacheRepository

logger = logging.getLogger(__name__)

METADATA_FILENAME = "metadata.json"


@dataclass
class _NamespaceIndex:
    """Loaded state of one namespace's metadata file."""

    mtime_ns: int | None = None
    records: dict[str, MetadataRecordEntity] = field(default_factory=dict)
    by_url: dict[str, list[str]] = field(default_factory=dict)

    def add(self, key: str, record: MetadataRecordEntity) -> None:
        previous = self.records.get(key)
        if previous is not None and previous.source_url != record.source_url:
            self._unlink_url(previous.source_url, key)

        self.records[key] = record
        keys = self.by_url.setdefault(record.source_url, [])
        if key not in keys:
            keys.append(key)

    def _unlink_url(self, url: str, key: str) -> None:
        keys = self.by_url.get(url, [])
        if key in keys:
            keys.remove(key)
        if not keys:
            self.by_url.pop(url, None)


class JsonMetadataIndex:
    """Per-namespace metadata index persisted as JSON.

    This class satisfies the MetadataIndex protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, files: FileCacheRepository) -> None:
        """Initialize the metadata index.

        Args:
            files: Repository whose namespace directories hold the index files
        """
        self._files = files
        self._indexes: dict[str, _NamespaceIndex] = {}
        self._lock = Lock()

    def _metadata_path(self, namespace: str) -> Path:
        return self._files.namespace_dir(namespace) / METADATA_FILENAME

    def _load(self, namespace: str) -> _NamespaceIndex:
        """Return the namespace index, reloading it if the file changed."""
        path = self._metadata_path(namespace)
        try:
            mtime_ns = path.stat().st_mtime_ns
        except FileNotFoundError:
            mtime_ns = None

        cached = self._indexes.get(namespace)
        if cached is not None and cached.mtime_ns == mtime_ns:
            return cached

        index = _NamespaceIndex(mtime_ns=mtime_ns)
        if mtime_ns is not None:
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                for key, value in data.items():
                    index.add(key, MetadataRecordEntity.from_dict(value))
            except (OSError, ValueError, KeyError, TypeError) as e:
                logger.warning(f"[MetadataIndex] Ignoring unreadable {path}: {e}")
                index = _NamespaceIndex(mtime_ns=mtime_ns)

        self._indexes[namespace] = index
        return index

    def _save(self, namespace: str, index: _NamespaceIndex) -> None:
        path = self._metadata_path(namespace)
        data = {key: record.to_dict() for key, record in index.records.items()}

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".metadata.", suffix=".tmp", dir=path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
            index.mtime_ns = path.stat().st_mtime_ns
        except OSError as e:
            raise StorageError(f"Failed to save metadata: {e}", details={"path": str(path)}) from e

    def record(self, namespace: str, key: str, metadata: MetadataRecordEntity) -> None:
        with self._lock:
            index = self._load(namespace)
            index.add(key, metadata)
            self._save(namespace, index)

    def get(self, namespace: str, key: str) -> MetadataRecordEntity | None:
        with self._lock:
            return self._load(namespace).records.get(key)

    def find_by_url(self, namespace: str, source_url: str) -> MetadataRecordEntity | None:
        with self._lock:
            index = self._load(namespace)
            keys = index.by_url.get(source_url)
            if not keys:
                return None
            return index.records[keys[0]]

    def count(self, namespace: str) -> int:
        with self._lock:
            return len(self._load(namespace).records)
