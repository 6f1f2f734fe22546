from __future__ import annotations

import json
import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Tuple

from .levels import MAX_LEVEL, clamp_level

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Progress:
    """Per-user progress record: completed levels (sorted, unique) and the level to resume."""
    completed_levels: Tuple[int, ...] = ()
    current_level: int = 1


def make_progress(completed: Iterable[int], current_level: int) -> Progress:
    levels = sorted({clamp_level(int(lv)) for lv in completed})
    return Progress(completed_levels=tuple(levels), current_level=clamp_level(current_level))


def record_completion(progress: Progress, level: int) -> Progress:
    """Marks a level done and moves the resume point past it."""
    level = clamp_level(level)
    current = max(progress.current_level, min(level + 1, MAX_LEVEL))
    return make_progress(progress.completed_levels + (level,), current)


def progress_to_json(progress: Progress) -> Dict[str, Any]:
    return {'completedLevels': list(progress.completed_levels), 'currentLevel': progress.current_level}


def progress_from_json(obj: Dict[str, Any]) -> Progress:
    return make_progress(obj.get('completedLevels', []), int(obj.get('currentLevel', 1)))


def _ensure_db_dir(db_path: str) -> None:
    """Ensures the directory for the SQLite DB exists before connecting."""
    directory = os.path.dirname(db_path)
    if directory and not os.path.exists(directory):
        os.makedirs(directory, exist_ok=True)


def _resolve_db_path(db_path: str) -> str:
    """Resolves a potentially unwritable DB path to a writable one, creating the directory if needed."""
    try:
        _ensure_db_dir(db_path)
        return db_path
    except PermissionError:
        logger.warning("Cannot create directory for %s; trying fallbacks", db_path)
    candidates = [
        os.getenv('SLIDEMAZE_DB_DIR'),
        os.path.join(os.getcwd(), 'data'),
        '/tmp',
    ]
    base = os.path.basename(db_path) or 'progress.db'
    for d in candidates:
        if not d:
            continue
        try:
            os.makedirs(d, exist_ok=True)
            return os.path.join(d, base)
        except OSError:
            continue
    # Last resort: current working directory
    return base


def _ensure_db(conn: sqlite3.Connection) -> None:
    """Ensures the progress table exists."""
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS progress (
            user_id TEXT PRIMARY KEY,
            data TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


class ProgressStore:
    """
    Key-value progress persistence keyed by a local profile name.
    The profile name is a selector, not an identity: there is no authentication.
    """

    def __init__(self, db_path: str) -> None:
        self.db_path = _resolve_db_path(db_path)

    def _connect(self) -> sqlite3.Connection:
        _ensure_db_dir(self.db_path)
        conn = sqlite3.connect(self.db_path)
        _ensure_db(conn)
        return conn

    def load(self, user_id: str) -> Progress:
        """Stored progress, or a fresh record for an unknown user."""
        conn = self._connect()
        try:
            row = conn.execute("SELECT data FROM progress WHERE user_id = ?", (user_id,)).fetchone()
        finally:
            conn.close()
        if not row:
            return Progress()
        try:
            return progress_from_json(json.loads(row[0]))
        except (ValueError, TypeError, AttributeError):
            logger.warning("Discarding unreadable progress for %r", user_id)
            return Progress()

    def save(self, user_id: str, progress: Progress) -> None:
        conn = self._connect()
        try:
            conn.execute(
                "INSERT OR REPLACE INTO progress (user_id, data, updated_at) VALUES (?, ?, ?)",
                (
                    user_id,
                    json.dumps(progress_to_json(progress)),
                    datetime.now(timezone.utc).isoformat(timespec='seconds'),
                ),
            )
            conn.commit()
        finally:
            conn.close()
