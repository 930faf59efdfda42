"""
Session snapshot storage for Recompose.

Whole-session snapshots (canvas transform + layer stack) are stored as
opaque JSON blobs, one .rcsession file per snapshot, inside a namespace
directory ('saves' or 'versions'). Each namespace keeps a bounded number of
snapshots and evicts the oldest first.

The store is constructed explicitly and has an explicit open/close
lifecycle; there is no module-level handle.

Example:
    >>> with SessionStore(Path("data"), namespace="saves") as store:
    ...     record = store.save({"canvas": {...}, "elements": stack.to_dict()}, label="draft")
    ...     snapshot = store.get(record.id)

Classes:
    SessionRecord: Metadata of a stored snapshot
    SessionStore: Directory-backed snapshot store
"""

import json
import logging
import re
import threading
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from RC_Libs.constants import (
    FIELD_CANVAS,
    FIELD_CREATED_AT,
    FIELD_EDIT_HISTORY,
    FIELD_ELEMENTS,
    FIELD_ID,
    FIELD_LABEL,
    FIELD_PROMPT_USED,
    FIELD_SCHEMA_VERSION,
    FIELD_SEQUENCE,
    FIELD_STATE,
    MAX_SAVES,
    MAX_VERSIONS,
    NAMESPACE_ID_PREFIXES,
    NAMESPACE_SAVES,
    NAMESPACE_VERSIONS,
    SESSION_FILE_EXTENSION,
    SESSION_SCHEMA_VERSION,
)
from RC_Libs.errors import ValidationError

logger = logging.getLogger(__name__)

SAFE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

DEFAULT_MAX_ENTRIES = {
    NAMESPACE_SAVES: MAX_SAVES,
    NAMESPACE_VERSIONS: MAX_VERSIONS,
}


@dataclass
class SessionRecord:
    """Metadata for one stored snapshot (the state itself is loaded lazily)."""
    id: str
    created_at: int
    sequence: int
    label: Optional[str] = None
    prompt_used: Optional[str] = None
    edit_history: Optional[List[str]] = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            FIELD_ID: self.id,
            FIELD_CREATED_AT: self.created_at,
            FIELD_SEQUENCE: self.sequence,
            FIELD_LABEL: self.label,
            FIELD_PROMPT_USED: self.prompt_used,
            FIELD_EDIT_HISTORY: self.edit_history,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        edit_history = data.get(FIELD_EDIT_HISTORY)
        return cls(
            id=str(data[FIELD_ID]),
            created_at=int(data.get(FIELD_CREATED_AT) or 0),
            sequence=int(data.get(FIELD_SEQUENCE) or 0),
            label=data.get(FIELD_LABEL),
            prompt_used=data.get(FIELD_PROMPT_USED),
            edit_history=list(edit_history) if isinstance(edit_history, list) else None,
        )


def validate_state(state: Any) -> Dict[str, Any]:
    """
    Check that a snapshot carries canvas and elements mappings.

    Raises:
        ValidationError: If either part is missing
    """
    if not isinstance(state, dict):
        raise ValidationError("state must be a mapping")
    if not isinstance(state.get(FIELD_CANVAS), dict) or not isinstance(state.get(FIELD_ELEMENTS), dict):
        raise ValidationError("state must include canvas and elements")
    return state


class SessionStore:
    """
    Bounded, directory-backed store of session snapshots.

    Args:
        base_dir: Directory holding one sub-directory per namespace
        namespace: 'saves' or 'versions'
        max_entries: Retention limit (200 for saves, 500 for versions by default)
    """

    def __init__(self, base_dir: Path, namespace: str = NAMESPACE_SAVES, max_entries: Optional[int] = None):
        if namespace not in NAMESPACE_ID_PREFIXES:
            raise ValueError(
                f"Unknown namespace '{namespace}'. Use one of: {', '.join(sorted(NAMESPACE_ID_PREFIXES))}"
            )

        if max_entries is None:
            max_entries = DEFAULT_MAX_ENTRIES[namespace]
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")

        self.base_dir = Path(base_dir)
        self.namespace = namespace
        self.max_entries = max_entries
        self._lock = threading.RLock()
        self._index: Optional[Dict[str, SessionRecord]] = None

    @property
    def directory(self) -> Path:
        return self.base_dir / self.namespace

    @property
    def is_open(self) -> bool:
        return self._index is not None

    def open(self) -> "SessionStore":
        """Create the namespace directory if needed and index existing snapshots."""
        with self._lock:
            if self._index is not None:
                return self

            self.directory.mkdir(parents=True, exist_ok=True)
            index: Dict[str, SessionRecord] = {}
            for path in sorted(self.directory.glob(f"*{SESSION_FILE_EXTENSION}")):
                record = self._read_record(path)
                if record is not None:
                    index[record.id] = record

            self._index = index
            logger.debug(f"Opened session store {self.directory} ({len(index)} snapshot(s))")
            self._evict()
            return self

    def close(self) -> None:
        with self._lock:
            self._index = None
            logger.debug(f"Closed session store {self.directory}")

    def __enter__(self) -> "SessionStore":
        return self.open()

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def _require_open(self) -> Dict[str, SessionRecord]:
        if self._index is None:
            raise RuntimeError("Session store is not open. Call open() first.")
        return self._index

    def _path_for(self, record_id: str) -> Path:
        return self.directory / f"{record_id}{SESSION_FILE_EXTENSION}"

    def _read_payload(self, path: Path) -> Optional[Dict[str, Any]]:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (FileNotFoundError, json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Ignoring unreadable snapshot {path.name}: {str(e)}")
            return None

        if not isinstance(payload, dict) or not payload.get(FIELD_ID):
            logger.warning(f"Ignoring malformed snapshot {path.name}")
            return None
        return payload

    def _read_record(self, path: Path) -> Optional[SessionRecord]:
        payload = self._read_payload(path)
        if payload is None:
            return None
        try:
            return SessionRecord.from_dict(payload)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring malformed snapshot {path.name}: {str(e)}")
            return None

    def _new_id(self) -> str:
        prefix = NAMESPACE_ID_PREFIXES[self.namespace]
        return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}"

    def save(
        self,
        state: Dict[str, Any],
        label: Optional[str] = None,
        prompt_used: Optional[str] = None,
        edit_history: Optional[List[str]] = None,
    ) -> SessionRecord:
        """
        Store a snapshot, evicting the oldest ones beyond the retention limit.

        Args:
            state: Mapping with 'canvas' and 'elements' mappings
            label: Optional human-readable label
            prompt_used: Prompt that produced the session's base image
            edit_history: Instructions applied during the session

        Returns:
            SessionRecord of the stored snapshot

        Raises:
            RuntimeError: If the store is not open
            ValidationError: If the state is malformed
        """
        validate_state(state)

        with self._lock:
            index = self._require_open()
            sequence = max((record.sequence for record in index.values()), default=0) + 1
            record = SessionRecord(
                id=self._new_id(),
                created_at=int(time.time() * 1000),
                sequence=sequence,
                label=label if isinstance(label, str) else None,
                prompt_used=prompt_used,
                edit_history=list(edit_history) if edit_history else None,
            )

            payload: Dict[str, Any] = {FIELD_SCHEMA_VERSION: SESSION_SCHEMA_VERSION}
            payload.update(record.to_dict())
            payload[FIELD_STATE] = state

            self._path_for(record.id).write_text(json.dumps(payload, indent=2), encoding="utf-8")
            index[record.id] = record
            self._evict()

        return record

    def list_records(self) -> List[SessionRecord]:
        """Return snapshot metadata, newest first."""
        with self._lock:
            index = self._require_open()
            return sorted(index.values(), key=lambda record: record.sequence, reverse=True)

    def get(self, record_id: str) -> Optional[Dict[str, Any]]:
        """
        Load a snapshot.

        Returns:
            The stored state with 'prompt_used' and 'edit_history' added, or
            None when no such snapshot exists
        """
        record_id = str(record_id)
        if not SAFE_ID_PATTERN.match(record_id):
            return None

        with self._lock:
            index = self._require_open()
            if record_id not in index:
                return None
            payload = self._read_payload(self._path_for(record_id))

        if payload is None or not isinstance(payload.get(FIELD_STATE), dict):
            return None

        snapshot = dict(payload[FIELD_STATE])
        snapshot[FIELD_PROMPT_USED] = payload.get(FIELD_PROMPT_USED)
        snapshot[FIELD_EDIT_HISTORY] = payload.get(FIELD_EDIT_HISTORY)
        return snapshot

    def delete(self, record_id: str) -> bool:
        """Delete a snapshot. Returns False if it did not exist."""
        with self._lock:
            index = self._require_open()
            if str(record_id) not in index:
                return False
            self._remove(str(record_id))
            return True

    def _remove(self, record_id: str) -> None:
        self._index.pop(record_id, None)
        try:
            self._path_for(record_id).unlink()
        except FileNotFoundError:
            pass

    def _evict(self) -> None:
        excess = len(self._index) - self.max_entries
        if excess <= 0:
            return

        oldest = sorted(self._index.values(), key=lambda record: record.sequence)[:excess]
        for record in oldest:
            self._remove(record.id)
        logger.info(f"Evicted {len(oldest)} oldest snapshot(s) from {self.namespace}")
