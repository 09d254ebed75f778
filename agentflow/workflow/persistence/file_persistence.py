"""
File Persistence — one JSON file per suspended workflow.

Files live at ``<directory>/<prefix><workflow_id><ext>``. Writes go to
a temporary file first and are moved into place with ``os.replace`` so
a crash mid-write never leaves a truncated record behind.
"""

from __future__ import annotations

import os
import re
import tempfile
import threading
from collections import defaultdict
from logging import getLogger
from pathlib import Path
from typing import DefaultDict, Union

from agentflow.exceptions import InterruptNotFoundError, PersistenceError
from agentflow.workflow.persistence.base import (
    PersistenceInterface,
    dump_interrupt,
    parse_interrupt,
)
from agentflow.workflow.workflow_model import WorkflowInterrupt

logger = getLogger(__name__)

DEFAULT_PREFIX = "agentflow_workflow_"
DEFAULT_EXT = ".store"

_SAFE_ID = re.compile(r"^[A-Za-z0-9_.\-]+$")


class FilePersistence(PersistenceInterface):
    """Persist interrupts as JSON files under an existing directory."""

    def __init__(
        self,
        directory: Union[str, Path],
        prefix: str = DEFAULT_PREFIX,
        ext: str = DEFAULT_EXT,
    ) -> None:
        self._dir = Path(directory)
        if not self._dir.is_dir():
            raise PersistenceError(f"Directory '{self._dir}' does not exist")
        self._prefix = prefix
        self._ext = ext
        self._locks: DefaultDict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    @property
    def directory(self) -> Path:
        return self._dir

    # ── Contract ──

    def save(self, workflow_id: str, interrupt: WorkflowInterrupt) -> None:
        path = self.path_for(workflow_id)
        document = dump_interrupt(workflow_id, interrupt)
        with self._lock_for(workflow_id):
            if not self._dir.is_dir():
                raise PersistenceError(f"Directory '{self._dir}' does not exist")
            tmp_name = None
            try:
                fd, tmp_name = tempfile.mkstemp(
                    dir=self._dir, prefix=f".{path.name}.", suffix=".tmp"
                )
                with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                    tmp.write(document)
                os.replace(tmp_name, path)
            except OSError as e:
                if tmp_name is not None:
                    Path(tmp_name).unlink(missing_ok=True)
                raise PersistenceError(
                    f"Failed to save workflow '{workflow_id}' to {path}: {e}"
                ) from e
        logger.info(
            f"Workflow interrupt saved: {workflow_id} "
            f"(node '{interrupt.current_node}')"
        )

    def load(self, workflow_id: str) -> WorkflowInterrupt:
        path = self.path_for(workflow_id)
        with self._lock_for(workflow_id):
            if not path.is_file():
                raise InterruptNotFoundError(workflow_id)
            try:
                document = path.read_text(encoding="utf-8")
            except OSError as e:
                raise PersistenceError(
                    f"Failed to read workflow '{workflow_id}' from {path}: {e}"
                ) from e
        return parse_interrupt(workflow_id, document)

    def delete(self, workflow_id: str) -> None:
        path = self.path_for(workflow_id)
        with self._lock_for(workflow_id):
            if path.exists():
                path.unlink()
                logger.info(f"Workflow interrupt deleted: {workflow_id}")

    def exists(self, workflow_id: str) -> bool:
        return self.path_for(workflow_id).is_file()

    # ── Internals ──

    def path_for(self, workflow_id: str) -> Path:
        if not _SAFE_ID.match(workflow_id) or workflow_id in (".", ".."):
            raise PersistenceError(
                f"Invalid workflow ID '{workflow_id}': use letters, digits, '.', '-' or '_'"
            )
        return self._dir / f"{self._prefix}{workflow_id}{self._ext}"

    def _lock_for(self, workflow_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[workflow_id]
