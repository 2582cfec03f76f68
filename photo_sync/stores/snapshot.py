"""Snapshot cache for last-known-good collections.

One JSON file per collection kind under the snapshot directory:
- feed.json: list of FeedPhoto
- topic.json: list of Topic

Snapshots are only read after both the local store and the remote source have
failed to produce data. load() reports a missing or corrupt snapshot as None;
load_required() raises NotFoundError for callers that branch on the error.
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from photo_sync.schemas.photo import FeedPhoto, RecordKind, Topic
from photo_sync.services.errors import NotFoundError

logger = logging.getLogger("uvicorn.error")

SNAPSHOT_VERSION = 1

_ADAPTERS: dict[RecordKind, TypeAdapter[Any]] = {
    RecordKind.FEED: TypeAdapter(list[FeedPhoto]),
    RecordKind.TOPIC: TypeAdapter(list[Topic]),
}


class SnapshotCache:
    """File-backed snapshot store, one file per collection kind."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    def path_for(self, kind: RecordKind) -> Path:
        if kind not in _ADAPTERS:
            raise ValueError(f"No snapshot support for {kind.value}")
        return self.directory / f"{kind.value}.json"

    def save(self, kind: RecordKind, records: list[FeedPhoto] | list[Topic]) -> Path:
        """Serialize a collection, overwriting any prior snapshot.

        The write goes to a temp file first and is moved into place, so a
        crash mid-write leaves the previous snapshot intact.
        """
        path = self.path_for(kind)
        self.directory.mkdir(parents=True, exist_ok=True)

        payload = {
            "version": SNAPSHOT_VERSION,
            "kind": kind.value,
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "items": _ADAPTERS[kind].dump_python(records, mode="json"),
        }

        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{kind.value}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Saved {kind.value} snapshot with {len(records)} items to {path}")
        return path

    def load(self, kind: RecordKind) -> list[FeedPhoto] | list[Topic] | None:
        """Load the most recent snapshot.

        Returns:
            The records in saved order, or None if no usable snapshot exists.
        """
        path = self.path_for(kind)
        if not path.exists():
            logger.warning(f"No {kind.value} snapshot at {path}")
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
            if not isinstance(payload, dict) or payload.get("kind") != kind.value:
                raise ValueError("unexpected snapshot layout")
            records = _ADAPTERS[kind].validate_python(payload.get("items", []))
        except (OSError, ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(f"Corrupt {kind.value} snapshot at {path}: {e}")
            return None

        logger.info(f"Loaded {kind.value} snapshot with {len(records)} items")
        return records

    def load_required(self, kind: RecordKind) -> list[FeedPhoto] | list[Topic]:
        """Load the most recent non-empty snapshot.

        Raises:
            NotFoundError: No snapshot file, a corrupt one, or an empty one.
        """
        records = self.load(kind)
        if not records:
            raise NotFoundError(f"No {kind.value} snapshot available in {self.directory}")
        return records

    def size_bytes(self) -> int:
        """Total size of all files in the snapshot directory."""
        if not self.directory.exists():
            return 0

        total = 0
        for filepath in self.directory.rglob("*"):
            try:
                if filepath.is_file():
                    total += filepath.stat().st_size
            except OSError as e:
                logger.warning(f"Failed to stat {filepath}: {e}")
        return total

    def describe_size(self) -> str:
        """Human readable cache size, e.g. "1.25 MB"."""
        return f"{self.size_bytes() / (1024 * 1024):.2f} MB"

    def clear(self) -> int:
        """Remove every snapshot file.

        Returns:
            Number of files removed.
        """
        if not self.directory.exists():
            return 0

        removed = 0
        for filepath in self.directory.iterdir():
            if not filepath.is_file():
                continue
            try:
                filepath.unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"Failed to remove snapshot file {filepath.name}: {e}")

        logger.info(f"Snapshot cache cleared ({removed} files)")
        return removed
