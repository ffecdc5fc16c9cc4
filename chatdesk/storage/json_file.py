"""Whole-file JSON collections.

A collection is a single file holding a JSON array of records. Loading reads
and validates the entire array; saving rewrites the entire file.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from chatdesk.storage.errors import CollectionWriteError, CorruptCollectionError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class JsonCollection(Generic[RecordT]):
    """File-backed list of ``record_type`` records."""

    def __init__(self, path: Path, record_type: type[RecordT], strict: bool = False) -> None:
        self.path = Path(path)
        self.record_type = record_type
        self.strict = strict
        # Array items from the last load that failed validation, written back on save
        self.unparsed: list[Any] = []

    @property
    def name(self) -> str:
        return self.path.stem

    def ensure(self) -> None:
        """Create the parent directory and an empty ``[]`` file when missing."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.path.write_text(json.dumps([], indent=2), encoding="utf-8")
            logger.info(f"Created empty collection file {self.path}")

    def load(self) -> list[RecordT]:
        """Read every record.

        A missing file is created empty. An unreadable file, or one that is not
        a JSON array, is logged and read as empty. Array items that fail
        validation are logged, left out of the result and kept in
        ``unparsed`` so the next save writes them back unchanged. A strict
        collection raises ``CorruptCollectionError`` in both cases instead.
        """
        self.ensure()
        try:
            items = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            return self._unreadable(str(e), e)
        if not isinstance(items, list):
            return self._unreadable(f"expected a JSON array, got {type(items).__name__}")

        records: list[RecordT] = []
        unparsed: list[Any] = []
        for index, item in enumerate(items):
            try:
                records.append(self.record_type.model_validate(item))
            except ValidationError as e:
                if self.strict:
                    raise CorruptCollectionError(self.path, f"record {index}: {e}") from e
                logger.warning(
                    f"Skipping invalid {self.name} record {index}: {e}",
                    extra={"event_type": "collection_record_invalid", "path": str(self.path)},
                )
                unparsed.append(item)

        self.unparsed = unparsed
        return records

    def _unreadable(self, reason: str, error: Exception | None = None) -> list[RecordT]:
        logger.error(
            f"Failed to load {self.name} data: {reason}",
            extra={"event_type": "collection_load_error", "path": str(self.path)},
        )
        if self.strict:
            raise CorruptCollectionError(self.path, reason) from error
        self.unparsed = []
        return []

    def save(self, records: list[RecordT]) -> None:
        """Overwrite the file with ``records`` followed by ``unparsed`` items.

        The new content is written to a sibling temp file and swapped in with
        ``os.replace``; the old file stays intact if writing fails.
        """
        payload = json.dumps(
            [record.model_dump(mode="json", exclude_none=True) for record in records]
            + self.unparsed,
            indent=2,
            ensure_ascii=False,
        )
        tmp_name = None
        try:
            self.ensure()
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error(
                f"Failed to save {self.name} data: {e}",
                extra={"event_type": "collection_save_error", "path": str(self.path)},
            )
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise CollectionWriteError(self.path, str(e)) from e

    def unparsed_ids(self) -> list[int]:
        """Integer ``id`` values found on ``unparsed`` items."""
        return [
            item["id"]
            for item in self.unparsed
            if isinstance(item, dict) and isinstance(item.get("id"), int)
        ]
