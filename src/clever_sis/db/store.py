"""
JSON-file record store.

Each collection (users, classes, enrollments, sync_log) is one JSON array on
disk under the data directory. Every write replaces the whole file:

  1. serialize the full collection (indent=2)
  2. write it to a temp file next to the target
  3. os.replace() the temp file over the target

Load-mutate-save cycles go through edit(), which holds the collection's lock
for the whole cycle so two requests cannot lose each other's updates.
"""
import copy
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List

from clever_sis.errors import StorageError

logger = logging.getLogger(__name__)

USERS = "users"
CLASSES = "classes"
ENROLLMENTS = "enrollments"
SYNC_LOG = "sync_log"

COLLECTIONS = (USERS, CLASSES, ENROLLMENTS, SYNC_LOG)


class RecordStore:
    """Whole-collection JSON persistence with a re-entrant lock per collection."""

    def __init__(self, data_dir: Path):
        """
        Args:
            data_dir: Directory holding one <collection>.json file per collection.
                      Created on first save, not here.
        """
        self.data_dir = Path(data_dir)
        self._locks = {kind: threading.RLock() for kind in COLLECTIONS}

    def path_for(self, kind: str) -> Path:
        if kind not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {kind!r}")
        return self.data_dir / f"{kind}.json"

    def load(self, kind: str) -> List[Dict[str, Any]]:
        """
        Read a whole collection.

        Returns:
            The stored records, or [] if the file does not exist yet.

        Raises:
            StorageError: if the file exists but is not a readable JSON array.
        """
        path = self.path_for(kind)
        with self._locks[kind]:
            if not path.exists():
                return []
            try:
                records = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
                logger.error("Collection %s unreadable at %s: %s", kind, path, exc)
                raise StorageError(f"Collection {kind!r} is unreadable: {exc}") from exc
            if not isinstance(records, list):
                logger.error("Collection %s at %s is not a JSON array", kind, path)
                raise StorageError(f"Collection {kind!r} is not a JSON array")
            return records

    def save(self, kind: str, records: List[Dict[str, Any]]) -> None:
        """Replace a whole collection on disk."""
        path = self.path_for(kind)
        with self._locks[kind]:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.data_dir, prefix=f".{kind}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(records, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

    @contextmanager
    def edit(self, kind: str) -> Iterator[List[Dict[str, Any]]]:
        """
        Exclusive load-mutate-save scope for one collection.

        Yields the loaded list; mutate it in place. It is saved when the block
        exits normally and has changed something, and discarded when the
        block raises. A block that only looks (e.g. a not-found lookup) leaves
        the file untouched.
        """
        with self._locks[kind]:
            records = self.load(kind)
            before = copy.deepcopy(records)
            yield records
            if records != before:
                self.save(kind, records)
