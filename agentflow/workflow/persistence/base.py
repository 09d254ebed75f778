"""
Persistence contract for workflow interrupts.

A backend stores at most one ``WorkflowInterrupt`` per workflow ID.
Every backend keeps the same JSON document (``StoredInterrupt``) so an
interrupt saved by one backend round-trips identically through another.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, Field, ValidationError

from agentflow.exceptions import PersistenceError, StateSerializationError
from agentflow.workflow.workflow_model import WorkflowInterrupt

FORMAT_VERSION = 1


class StoredInterrupt(BaseModel):
    """On-disk envelope around an encoded ``WorkflowInterrupt``."""

    workflow_id: str
    format_version: int = FORMAT_VERSION
    saved_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    interrupt: Dict[str, Any]


def dump_interrupt(workflow_id: str, interrupt: WorkflowInterrupt) -> str:
    """Encode ``interrupt`` into the JSON document stored by backends."""
    record = StoredInterrupt(workflow_id=workflow_id, interrupt=interrupt.to_dict())
    return record.model_dump_json(indent=2)


def parse_interrupt(workflow_id: str, document: str) -> WorkflowInterrupt:
    """Decode a stored JSON document back into a ``WorkflowInterrupt``."""
    try:
        record = StoredInterrupt.model_validate_json(document)
    except ValidationError as e:
        raise PersistenceError(
            f"Corrupted interrupt record for workflow '{workflow_id}': {e}"
        ) from e
    if record.format_version != FORMAT_VERSION:
        raise PersistenceError(
            f"Unsupported interrupt format version {record.format_version} "
            f"for workflow '{workflow_id}'"
        )
    try:
        return WorkflowInterrupt.from_dict(record.interrupt)
    except StateSerializationError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise PersistenceError(
            f"Corrupted interrupt record for workflow '{workflow_id}': {e}"
        ) from e


class PersistenceInterface(ABC):
    """Save, load and delete workflow interrupts keyed by workflow ID."""

    @abstractmethod
    def save(self, workflow_id: str, interrupt: WorkflowInterrupt) -> None:
        """Store ``interrupt`` (last write wins)."""

    @abstractmethod
    def load(self, workflow_id: str) -> WorkflowInterrupt:
        """Return the stored interrupt.

        Raises:
            InterruptNotFoundError: Nothing is stored for ``workflow_id``.
        """

    @abstractmethod
    def delete(self, workflow_id: str) -> None:
        """Remove the stored interrupt; no-op when none exists."""

    @abstractmethod
    def exists(self, workflow_id: str) -> bool:
        """Whether an interrupt is stored for ``workflow_id``."""
