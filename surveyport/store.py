"""
JSON document store for surveys and questions.

The store is one JSON document holding two collections, ``surveys`` and
``questions``. Reads go straight to the file. Writes are handed to a single
writer thread and applied strictly in submission order; each write lands in a
temporary file that is then renamed over the store, so readers see either the
previous or the next document, never a partial one.

Usage:
    store = JsonStore("data/store.json")
    snapshot = store.read()
    snapshot["surveys"].append({...})
    store.write(snapshot)
"""

import json
import logging
import os
import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional

from jsonschema import Draft7Validator

from surveyport.models import empty_snapshot

logger = logging.getLogger(__name__)


SNAPSHOT_SCHEMA = {
    "type": "object",
    "required": ["surveys", "questions"],
    "properties": {
        "surveys": {"type": "array", "items": {"type": "object"}},
        "questions": {"type": "array", "items": {"type": "object"}},
    },
}

_snapshot_validator = Draft7Validator(SNAPSHOT_SCHEMA)


class StoreError(Exception):
    """Base class for store failures."""


class StoreCorruptError(StoreError):
    """Raised when the persisted document cannot be parsed or has the wrong shape."""


class StorePersistenceError(StoreError):
    """Raised when a write could not be committed to disk."""


def _serialize(snapshot: Dict[str, Any]) -> str:
    return json.dumps(snapshot, indent=2, ensure_ascii=False)


class JsonStore:
    """Single-document store with FIFO, single-writer persistence."""

    def __init__(self, path):
        self.path = Path(path)
        # One worker: jobs run one at a time, in the order they were submitted
        self._writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="store-writer")
        self._init_lock = threading.Lock()
        self._initialized = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self) -> None:
        """Stop the writer after pending writes have been applied."""
        self._writer.shutdown(wait=True)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read(self) -> Dict[str, List[Dict[str, Any]]]:
        """
        Load the current snapshot, creating an empty store on first use.

        Raises:
            StoreCorruptError: If the document is not valid JSON or not a snapshot
        """
        self._ensure_initialized()
        raw = self.path.read_text(encoding="utf-8")

        if not raw.strip():
            return empty_snapshot()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreCorruptError(f"{self.path.name} contains invalid JSON: {e}") from e

        problems = sorted(_snapshot_validator.iter_errors(data), key=lambda err: list(err.path))
        if problems:
            raise StoreCorruptError(
                f"{self.path.name} is not a valid store document: {problems[0].message}"
            )
        return data

    def get_survey(self, survey_id: str) -> Optional[Dict[str, Any]]:
        for survey in self.read()["surveys"]:
            if survey.get("surveyId") == survey_id:
                return survey
        return None

    def get_questions(self, survey_id: str) -> List[Dict[str, Any]]:
        return [q for q in self.read()["questions"] if q.get("surveyId") == survey_id]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def write(self, snapshot: Dict[str, Any]) -> None:
        """
        Replace the stored document with ``snapshot``.

        The snapshot is serialized immediately; the commit waits its turn
        behind earlier writes. Blocks until this write has been applied.

        Raises:
            StorePersistenceError: If the document could not be written
        """
        self._ensure_initialized()
        serialized = _serialize(snapshot)
        future = self._writer.submit(self._commit, serialized)
        future.result()
        logger.info(
            "Committed store %s (%d surveys, %d questions)",
            self.path,
            len(snapshot.get("surveys", [])),
            len(snapshot.get("questions", [])),
        )

    def _ensure_initialized(self) -> None:
        if self._initialized and self.path.exists():
            return
        with self._init_lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Goes through the writer so it cannot interleave with a commit
            self._writer.submit(self._create_if_missing).result()
            self._initialized = True

    def _create_if_missing(self) -> None:
        if not self.path.exists():
            logger.info("Creating empty store at %s", self.path)
            self._commit(_serialize(empty_snapshot()))

    def _commit(self, serialized: str) -> None:
        """Write to a temporary file and rename it over the store."""
        temp_path = self.path.with_name(
            f"{self.path.name}.{os.getpid()}.{uuid.uuid4().hex}.tmp"
        )
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(serialized)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            self._discard(temp_path)
            raise StorePersistenceError(f"Failed to write {temp_path}: {e}") from e

        try:
            os.replace(temp_path, self.path)
            return
        except OSError as rename_error:
            logger.warning(
                "Atomic rename onto %s failed (%s); overwriting in place",
                self.path,
                rename_error,
            )

        try:
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(serialized)
        except OSError as e:
            raise StorePersistenceError(f"Failed to write {self.path}: {e}") from e
        finally:
            self._discard(temp_path)

    @staticmethod
    def _discard(temp_path: Path) -> None:
        try:
            temp_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove temporary file %s: %s", temp_path, e)
