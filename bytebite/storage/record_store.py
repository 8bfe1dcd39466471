"""JSON document storage for bytebite.

Each record type (feeds, articles) lives in a single JSON document holding the
full collection. Reads load the whole document, writes replace it.
Mutations go through ``update`` so that one store has exactly one writer at a
time.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from bytebite.errors import StorageFormatError, StorageReadError, StorageWriteError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

Mutation = Callable[[List[T]], Tuple[Optional[List[T]], R]]


class RecordStore(Generic[T]):
    """Durable list of records backed by one JSON document."""

    def __init__(
        self,
        path: Path,
        kind: str,
        from_record: Callable[[Dict[str, Any]], T],
        to_record: Callable[[T], Dict[str, Any]],
    ):
        self.path = Path(path)
        self.kind = kind
        self._from_record = from_record
        self._to_record = to_record
        self._lock = asyncio.Lock()

    def exists(self) -> bool:
        return self.path.is_file()

    async def bootstrap(self) -> bool:
        """Create an empty document if none exists yet.

        Returns:
            True if a new document was written, False if one was already there
        """
        async with self._lock:
            if self.exists():
                return False
            await asyncio.to_thread(self._write, [])
            logger.info(f"Bootstrapped empty {self.kind} store at {self.path}")
            return True

    async def load(self) -> List[T]:
        """Load the full collection.

        Raises:
            StorageReadError: If the document is missing or unreadable
            StorageFormatError: If the content does not decode into records
        """
        return await asyncio.to_thread(self._read)

    async def save(self, records: List[T]) -> None:
        """Replace the stored collection with ``records``.

        Raises:
            StorageWriteError: On any I/O failure
        """
        async with self._lock:
            await asyncio.to_thread(self._write, records)

    async def update(self, mutate: Mutation) -> R:
        """Run a read-modify-write cycle while holding the store lock.

        ``mutate`` receives the current records and returns the records to
        persist (or None to skip the write) together with a result value.
        """
        async with self._lock:
            records = await asyncio.to_thread(self._read)
            new_records, result = mutate(records)
            if new_records is not None:
                await asyncio.to_thread(self._write, new_records)
            return result

    def _read(self) -> List[T]:
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageReadError(self.kind, self.path, str(e)) from e

        try:
            raw = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageFormatError(self.kind, self.path, f"invalid JSON: {e}") from e

        if not isinstance(raw, list):
            raise StorageFormatError(
                self.kind, self.path, f"expected a list of records, got {type(raw).__name__}"
            )

        records = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                raise StorageFormatError(
                    self.kind, self.path, f"record {index} is not an object"
                )
            try:
                records.append(self._from_record(item))
            except KeyError as e:
                raise StorageFormatError(
                    self.kind, self.path, f"record {index} is missing field {e}"
                ) from e
            except (TypeError, ValueError) as e:
                raise StorageFormatError(
                    self.kind, self.path, f"record {index}: {e}"
                ) from e

        logger.debug(f"Read {len(records)} records from {self.kind} store")
        return records

    def _write(self, records: List[T]) -> None:
        payload = json.dumps([self._to_record(r) for r in records], indent=2)

        # Write to a sibling temp file and swap it in, so readers never see a
        # partially written document.
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageWriteError(self.kind, self.path, str(e)) from e

        logger.debug(f"Wrote {len(records)} records to {self.kind} store")
