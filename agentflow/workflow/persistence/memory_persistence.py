"""
In-memory persistence — the default backend of a ``Workflow``.

Records are kept as the same encoded JSON documents the durable backends
write, so a state that would not survive a restart fails here too.
"""

from __future__ import annotations

import threading
from typing import Dict

from agentflow.exceptions import InterruptNotFoundError
from agentflow.workflow.persistence.base import (
    PersistenceInterface,
    dump_interrupt,
    parse_interrupt,
)
from agentflow.workflow.workflow_model import WorkflowInterrupt


class InMemoryPersistence(PersistenceInterface):
    def __init__(self) -> None:
        self._documents: Dict[str, str] = {}
        self._lock = threading.Lock()

    def save(self, workflow_id: str, interrupt: WorkflowInterrupt) -> None:
        document = dump_interrupt(workflow_id, interrupt)
        with self._lock:
            self._documents[workflow_id] = document

    def load(self, workflow_id: str) -> WorkflowInterrupt:
        with self._lock:
            document = self._documents.get(workflow_id)
        if document is None:
            raise InterruptNotFoundError(workflow_id)
        return parse_interrupt(workflow_id, document)

    def delete(self, workflow_id: str) -> None:
        with self._lock:
            self._documents.pop(workflow_id, None)

    def exists(self, workflow_id: str) -> bool:
        with self._lock:
            return workflow_id in self._documents
