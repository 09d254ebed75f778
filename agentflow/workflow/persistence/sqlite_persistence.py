"""
SQLite persistence for workflow interrupts.

Keeps one row per workflow ID in a single table, so many workflows (and
processes) can share one database file. Each operation opens its own
short-lived connection; WAL mode lets readers proceed during writes.
"""

from __future__ import annotations

import re
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from logging import getLogger
from pathlib import Path
from typing import Iterator, List, Union

from agentflow.exceptions import InterruptNotFoundError, PersistenceError
from agentflow.workflow.persistence.base import (
    PersistenceInterface,
    dump_interrupt,
    parse_interrupt,
)
from agentflow.workflow.workflow_model import WorkflowInterrupt

logger = getLogger(__name__)

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLitePersistence(PersistenceInterface):
    """Persist interrupts in a SQLite database file.

    Args:
        db_path: Database file (created if missing; its directory must exist).
        table: Table name holding the interrupt records.
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        table: str = "workflow_interrupts",
    ) -> None:
        self.db_path = Path(db_path)
        if not self.db_path.parent.is_dir():
            raise PersistenceError(
                f"Directory '{self.db_path.parent}' does not exist"
            )
        if not _TABLE_NAME.match(table):
            raise PersistenceError(f"Invalid table name '{table}'")
        self._table = table
        self._setup()
        logger.info(f"SQLitePersistence initialized: {self.db_path}")

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Connection context: commits on success, rolls back on error."""
        try:
            conn = sqlite3.connect(str(self.db_path), timeout=30)
        except sqlite3.Error as e:
            raise PersistenceError(f"Cannot open database {self.db_path}: {e}") from e
        try:
            with conn:
                yield conn
        except sqlite3.Error as e:
            raise PersistenceError(f"Database error on {self.db_path}: {e}") from e
        finally:
            conn.close()

    def _setup(self) -> None:
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self._table} (
                    workflow_id TEXT PRIMARY KEY,
                    current_node TEXT NOT NULL,
                    document TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )

    # ── Contract ──

    def save(self, workflow_id: str, interrupt: WorkflowInterrupt) -> None:
        document = dump_interrupt(workflow_id, interrupt)
        with self._connect() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO {self._table} "
                f"(workflow_id, current_node, document, updated_at) VALUES (?, ?, ?, ?)",
                (
                    workflow_id,
                    interrupt.current_node,
                    document,
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
        logger.info(
            f"Workflow interrupt saved: {workflow_id} "
            f"(node '{interrupt.current_node}')"
        )

    def load(self, workflow_id: str) -> WorkflowInterrupt:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT document FROM {self._table} WHERE workflow_id = ?",
                (workflow_id,),
            ).fetchone()
        if row is None:
            raise InterruptNotFoundError(workflow_id)
        return parse_interrupt(workflow_id, row[0])

    def delete(self, workflow_id: str) -> None:
        with self._connect() as conn:
            cursor = conn.execute(
                f"DELETE FROM {self._table} WHERE workflow_id = ?",
                (workflow_id,),
            )
        if cursor.rowcount:
            logger.info(f"Workflow interrupt deleted: {workflow_id}")

    def exists(self, workflow_id: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT 1 FROM {self._table} WHERE workflow_id = ?",
                (workflow_id,),
            ).fetchone()
        return row is not None

    def list_suspended(self, limit: int = 100) -> List[dict]:
        """List suspended workflows, most recently saved first."""
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT workflow_id, current_node, updated_at FROM {self._table} "
                f"ORDER BY updated_at DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [
            {"workflow_id": r[0], "current_node": r[1], "updated_at": r[2]}
            for r in rows
        ]
