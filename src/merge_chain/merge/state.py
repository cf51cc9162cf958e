"""Chain session persistence for resume capability.

A session record on disk is the single signal that a chain merge was
interrupted. It is written when the merge loop stops early and removed when
the loop completes or the operator aborts.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from merge_chain.core.branches import branch_name
from merge_chain.core.config import DEFAULT_STATE_FILE
from merge_chain.errors import CorruptStateError

__all__ = [
    "STATE_VERSION",
    "ChainSession",
    "clear_state",
    "get_state_path",
    "has_active_merge",
    "load_state",
    "save_state",
]

logger = logging.getLogger(__name__)

STATE_VERSION = 1


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ChainSession:
    """An in-progress chain merge from ``ch{start}`` to ``ch{end}``.

    ``next_index`` is the branch still awaiting a merge from its predecessor.
    It starts at ``start + 1`` and the chain is complete once it passes
    ``end``.
    """

    start: int
    end: int
    origin_message: str
    next_index: int
    started_at: str = field(default_factory=_now)
    updated_at: str = field(default_factory=_now)
    last_error: str | None = None

    @classmethod
    def begin(cls, start: int, end: int, origin_message: str) -> "ChainSession":
        return cls(start=start, end=end, origin_message=origin_message, next_index=start + 1)

    @property
    def total(self) -> int:
        return self.end - self.start

    @property
    def remaining(self) -> int:
        return max(self.end - self.next_index + 1, 0)

    @property
    def is_complete(self) -> bool:
        return self.next_index > self.end

    @property
    def current_target(self) -> str | None:
        return None if self.is_complete else branch_name(self.next_index)

    @property
    def completed_branches(self) -> list[str]:
        return [branch_name(i) for i in range(self.start + 1, self.next_index)]

    @property
    def pending_branches(self) -> list[str]:
        return [branch_name(i) for i in range(self.next_index, self.end + 1)]

    @property
    def progress_percent(self) -> float:
        if self.total <= 0:
            return 0.0
        return (self.total - self.remaining) / self.total * 100

    def advance_to(self, index: int) -> None:
        self.next_index = index
        self.updated_at = _now()

    def record_interruption(self, index: int, reason: str) -> None:
        self.advance_to(index)
        self.last_error = reason

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": STATE_VERSION,
            "start": self.start,
            "end": self.end,
            "origin_message": self.origin_message,
            "next": self.next_index,
            "started_at": self.started_at,
            "updated_at": self.updated_at,
            "last_error": self.last_error,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChainSession":
        """Build a session from its persisted form.

        Raises:
            ValueError: If the record is from an unknown version or its
                fields are missing, mistyped or inconsistent.
        """
        if not isinstance(data, dict):
            raise ValueError("record is not an object")
        version = data.get("version")
        if version != STATE_VERSION:
            raise ValueError(f"unsupported record version {version!r}")

        missing = [key for key in ("start", "end", "origin_message", "next") if key not in data]
        if missing:
            raise ValueError(f"missing fields: {', '.join(missing)}")

        for key in ("start", "end", "next"):
            value = data[key]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"'{key}' must be a non-negative integer")
        if not isinstance(data["origin_message"], str):
            raise ValueError("'origin_message' must be a string")

        start, end, next_index = data["start"], data["end"], data["next"]
        if start >= end:
            raise ValueError("'start' must be less than 'end'")
        if not start + 1 <= next_index <= end + 1:
            raise ValueError(f"'next' must lie between {start + 1} and {end + 1}")

        return cls(
            start=start,
            end=end,
            origin_message=data["origin_message"],
            next_index=next_index,
            started_at=data.get("started_at") or _now(),
            updated_at=data.get("updated_at") or _now(),
            last_error=data.get("last_error"),
        )


def get_state_path(state_dir: Path, state_file: str = DEFAULT_STATE_FILE) -> Path:
    """Return the session file location.

    The CLI passes the repository's git directory as ``state_dir``; the
    record must stay out of the work tree.
    """
    return state_dir / state_file


def save_state(
    session: ChainSession, state_dir: Path, state_file: str = DEFAULT_STATE_FILE
) -> Path:
    """Persist the session atomically.

    Writes to a temporary sibling first, then uses ``os.replace`` so a crash
    mid-write never leaves a truncated record behind.
    """
    path = get_state_path(state_dir, state_file)
    tmp_path = path.with_name(path.name + ".tmp")
    payload = json.dumps(session.to_dict(), indent=2, ensure_ascii=False) + "\n"

    tmp_path.write_text(payload, encoding="utf-8")
    os.replace(str(tmp_path), str(path))
    logger.debug("Saved chain session %s..%s next=%s", session.start, session.end, session.next_index)
    return path


def load_state(state_dir: Path, state_file: str = DEFAULT_STATE_FILE) -> ChainSession | None:
    """Load the persisted session.

    Returns None when no session file exists. A file that is present but
    unreadable raises ``CorruptStateError``: its presence still means a merge
    was interrupted.
    """
    path = get_state_path(state_dir, state_file)
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return ChainSession.from_dict(data)
    except (OSError, json.JSONDecodeError, ValueError) as exc:
        raise CorruptStateError(str(path), str(exc)) from exc


def clear_state(state_dir: Path, state_file: str = DEFAULT_STATE_FILE) -> bool:
    """Remove the session file. Returns True if a file was removed."""
    path = get_state_path(state_dir, state_file)
    if not path.exists():
        return False
    path.unlink()
    logger.debug("Cleared chain session at %s", path)
    return True


def has_active_merge(state_dir: Path, state_file: str = DEFAULT_STATE_FILE) -> bool:
    """Return True if a session file is present, readable or not."""
    return get_state_path(state_dir, state_file).exists()
