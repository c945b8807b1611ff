"""Durable snapshots of assistant instances."""

import sqlite3
import threading
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from pr_assistant.core.logging import get_logger
from pr_assistant.services.assistant.state import AssistantState

logger = get_logger("assistant.store")


class StateStore(ABC):
    """Snapshot storage keyed by process id."""

    @abstractmethod
    def save(self, state: AssistantState) -> None:
        """Insert or replace the snapshot of an instance."""

    @abstractmethod
    def load(self, process_id: str) -> Optional[AssistantState]:
        """Latest snapshot of an instance, or None."""

    @abstractmethod
    def list_active(self) -> list[AssistantState]:
        """Snapshots of instances that have not terminated."""


class InMemoryStateStore(StateStore):
    def __init__(self) -> None:
        self._states: dict[str, str] = {}
        self._lock = threading.Lock()

    def save(self, state: AssistantState) -> None:
        with self._lock:
            self._states[state.process_id] = state.model_dump_json()

    def load(self, process_id: str) -> Optional[AssistantState]:
        with self._lock:
            raw = self._states.get(process_id)
        return AssistantState.model_validate_json(raw) if raw else None

    def list_active(self) -> list[AssistantState]:
        with self._lock:
            raws = list(self._states.values())
        states = [AssistantState.model_validate_json(raw) for raw in raws]
        return [s for s in states if s.status != "terminal"]


class SqliteStateStore(StateStore):
    def __init__(self, db_path: Path) -> None:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        self._db_path = db_path
        self._lock = threading.Lock()
        self._init_schema()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._db_path)
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS assistant_states (
                    process_id TEXT NOT NULL PRIMARY KEY,
                    status TEXT NOT NULL,
                    snapshot TEXT NOT NULL,
                    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
                )
                """
            )

    def save(self, state: AssistantState) -> None:
        with self._lock, self._connect() as conn:
            conn.execute(
                """
                INSERT INTO assistant_states(process_id, status, snapshot)
                VALUES(?, ?, ?)
                ON CONFLICT(process_id) DO UPDATE SET
                    status=excluded.status,
                    snapshot=excluded.snapshot,
                    updated_at=strftime('%Y-%m-%dT%H:%M:%fZ', 'now')
                """,
                (state.process_id, state.status, state.model_dump_json()),
            )

    def load(self, process_id: str) -> Optional[AssistantState]:
        with self._lock, self._connect() as conn:
            row = conn.execute(
                "SELECT snapshot FROM assistant_states WHERE process_id = ?",
                (process_id,),
            ).fetchone()
        if row is None:
            return None
        return AssistantState.model_validate_json(row[0])

    def list_active(self) -> list[AssistantState]:
        with self._lock, self._connect() as conn:
            rows = conn.execute(
                """
                SELECT snapshot FROM assistant_states
                WHERE status != 'terminal'
                ORDER BY process_id ASC
                """
            ).fetchall()
        return [AssistantState.model_validate_json(row[0]) for row in rows]
