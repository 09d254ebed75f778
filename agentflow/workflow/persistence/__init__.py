"""
Workflow Persistence — durable storage for suspended workflows.

    base               — PersistenceInterface + the stored JSON envelope
    file_persistence   — one JSON file per workflow ID
    memory_persistence — process-local dict (default backend)
    sqlite_persistence — one row per workflow ID in a SQLite database
"""

from agentflow.workflow.persistence.base import (
    PersistenceInterface,
    StoredInterrupt,
    dump_interrupt,
    parse_interrupt,
)
from agentflow.workflow.persistence.file_persistence import FilePersistence
from agentflow.workflow.persistence.memory_persistence import InMemoryPersistence
from agentflow.workflow.persistence.sqlite_persistence import SQLitePersistence

__all__ = [
    "PersistenceInterface",
    "StoredInterrupt",
    "dump_interrupt",
    "parse_interrupt",
    "FilePersistence",
    "InMemoryPersistence",
    "SQLitePersistence",
]
