"""File Document Store — one JSON file per record, one directory per collection.

Invariants:
    - create never overwrites: the record is hard-linked into place, which fails
      atomically if the key already exists (ConflictError)
    - update replaces the whole document (no merge) and requires an existing record
    - Every write goes temp file -> fsync -> link/rename: a crash leaves either the
      old or the new document, never a truncated one
    - delete of a missing record is an error (NotFoundError), not a no-op
    - list excludes dotfiles, temp files and reserved entries
    - OS failures map to PersistenceError; details are logged, not returned

Design Decisions:
    - Blocking file IO runs in a worker thread (asyncio.to_thread) so every store
      call is a suspension point for the event loop
    - Record ids are percent-encoded into filenames (urllib.parse.quote), so any
      address the email check accepts is storable; list decodes them back
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from urllib.parse import quote, unquote

from storefront.core.domain_types import Collection, RESERVED_ENTRIES
from storefront.core.errors import (
    ConflictError, NotFoundError, PersistenceError, ValidationError,
)

logger = logging.getLogger(__name__)

_SAFE_ID_CHARS = "@.+-_"
_MAX_NAME_LENGTH = 250
_SUFFIX = ".json"
_TEMP_PREFIX = ".tmp-"


class FileDocumentStore:
    """Keyed JSON persistence rooted at a single storage directory."""

    def __init__(
        self, root: str | Path, collections: Iterable[Collection] = tuple(Collection),
    ):
        self.root = Path(root)
        self.collections = frozenset(collections)

    def ensure_collections(self) -> None:
        """Create the storage root and one directory per collection."""
        for collection in self.collections:
            (self.root / collection.value).mkdir(parents=True, exist_ok=True)

    # ─── Public async API ─────────────────────────────────────────

    async def create(self, collection: Collection, record_id: str, doc: dict) -> dict:
        return await asyncio.to_thread(self._create, collection, record_id, doc)

    async def read(self, collection: Collection, record_id: str) -> dict:
        return await asyncio.to_thread(self._read, collection, record_id)

    async def update(self, collection: Collection, record_id: str, doc: dict) -> dict:
        return await asyncio.to_thread(self._update, collection, record_id, doc)

    async def delete(self, collection: Collection, record_id: str) -> None:
        await asyncio.to_thread(self._delete, collection, record_id)

    async def list(self, collection: Collection) -> list[str]:
        return await asyncio.to_thread(self._list, collection)

    async def health_check(self) -> bool:
        """Storage root exists and is writable (readiness probe)."""
        return await asyncio.to_thread(
            lambda: self.root.is_dir() and os.access(self.root, os.W_OK),
        )

    # ─── Blocking implementations ─────────────────────────────────

    def _create(self, collection: Collection, record_id: str, doc: dict) -> dict:
        collection = self._collection(collection)
        target = self._path(collection, record_id)
        tmp = self._write_temp(target.parent, doc, collection)
        try:
            os.link(tmp, target)
        except FileExistsError:
            raise ConflictError(collection.resource_name, record_id)
        except OSError as e:
            logger.error(
                f"Could not create record: {e}",
                extra={"collection": collection.value, "record_id": record_id},
            )
            raise PersistenceError(str(e), "create")
        finally:
            tmp.unlink(missing_ok=True)
        self._fsync_dir(target.parent, collection, record_id)
        logger.debug(
            "Record created",
            extra={"collection": collection.value, "record_id": record_id},
        )
        return doc

    def _read(self, collection: Collection, record_id: str) -> dict:
        collection = self._collection(collection)
        target = self._path(collection, record_id)
        try:
            raw = target.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise NotFoundError(collection.resource_name, record_id)
        except OSError as e:
            logger.error(
                f"Could not read record: {e}",
                extra={"collection": collection.value, "record_id": record_id},
            )
            raise PersistenceError(str(e), "read")
        try:
            doc = json.loads(raw)
        except ValueError as e:
            logger.error(
                f"Corrupt record: {e}",
                extra={"collection": collection.value, "record_id": record_id},
            )
            raise PersistenceError(f"corrupt record: {e}", "read")
        if not isinstance(doc, dict):
            raise PersistenceError("record is not a JSON object", "read")
        return doc

    def _update(self, collection: Collection, record_id: str, doc: dict) -> dict:
        collection = self._collection(collection)
        target = self._path(collection, record_id)
        if not target.is_file():
            raise NotFoundError(collection.resource_name, record_id)
        tmp = self._write_temp(target.parent, doc, collection)
        try:
            os.replace(tmp, target)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            logger.error(
                f"Could not update record: {e}",
                extra={"collection": collection.value, "record_id": record_id},
            )
            raise PersistenceError(str(e), "update")
        self._fsync_dir(target.parent, collection, record_id)
        return doc

    def _delete(self, collection: Collection, record_id: str) -> None:
        collection = self._collection(collection)
        target = self._path(collection, record_id)
        try:
            target.unlink()
        except FileNotFoundError:
            raise NotFoundError(collection.resource_name, record_id)
        except OSError as e:
            logger.error(
                f"Could not delete record: {e}",
                extra={"collection": collection.value, "record_id": record_id},
            )
            raise PersistenceError(str(e), "delete")

    def _list(self, collection: Collection) -> list[str]:
        collection = self._collection(collection)
        directory = self.root / collection.value
        try:
            names = os.listdir(directory)
        except OSError as e:
            logger.error(
                f"Could not list collection: {e}",
                extra={"collection": collection.value},
            )
            raise PersistenceError(str(e), "list")
        return sorted(
            unquote(name[: -len(_SUFFIX)])
            for name in names
            if name.endswith(_SUFFIX)
            and not name.startswith(".")
            and name not in RESERVED_ENTRIES
        )

    # ─── Helpers ──────────────────────────────────────────────────

    def _collection(self, collection: Collection | str) -> Collection:
        try:
            resolved = Collection(collection)
        except ValueError:
            raise ValidationError(f"Unknown collection: {collection}", "collection")
        if resolved not in self.collections:
            raise ValidationError(f"Unknown collection: {collection}", "collection")
        return resolved

    def _path(self, collection: Collection, record_id: str) -> Path:
        resolved = self._collection(collection)
        if not isinstance(record_id, str) or not record_id:
            raise ValidationError("The id is invalid", "id")
        encoded = quote(record_id, safe=_SAFE_ID_CHARS)
        if encoded.startswith("."):
            # Dotfiles are never records
            encoded = "%2E" + encoded[1:]
        name = encoded + _SUFFIX
        if len(name) > _MAX_NAME_LENGTH:
            raise ValidationError("The id is too long", "id")
        return self.root / resolved.value / name

    def _write_temp(self, directory: Path, doc: dict, collection: Collection) -> Path:
        """Serialize doc into a synced temp file next to its final location."""
        payload = json.dumps(doc, ensure_ascii=False)
        try:
            fd, name = tempfile.mkstemp(
                dir=directory, prefix=_TEMP_PREFIX, suffix=_SUFFIX,
            )
        except OSError as e:
            logger.error(
                f"Could not open temp file: {e}",
                extra={"collection": collection.value},
            )
            raise PersistenceError(str(e), "write")
        tmp = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            tmp.unlink(missing_ok=True)
            logger.error(
                f"Could not write temp file: {e}",
                extra={"collection": collection.value},
            )
            raise PersistenceError(str(e), "write")
        return tmp

    @staticmethod
    def _fsync_dir(directory: Path, collection: Collection, record_id: str) -> None:
        """Persist the directory entry of a link/rename (POSIX only)."""
        if not hasattr(os, "O_DIRECTORY"):
            return
        try:
            fd = os.open(directory, os.O_RDONLY | os.O_DIRECTORY)
            try:
                os.fsync(fd)
            finally:
                os.close(fd)
        except OSError as e:
            logger.error(
                f"Record written but directory not synced: {e}",
                extra={"collection": collection.value, "record_id": record_id},
            )
            raise PersistenceError(str(e), "sync")
