"""
Workflow Events — typed notifications emitted while a workflow runs.

Handlers subscribe per ``WorkflowEventType``; dispatch is a plain lookup
in a dict keyed by the enum. Handler errors propagate to the caller of
``run``/``resume``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from agentflow.workflow.workflow_state import WorkflowState


class WorkflowEventType(str, Enum):
    """Kinds of events emitted by ``Workflow``."""
    WORKFLOW_START = "workflow_start"
    WORKFLOW_RESUME = "workflow_resume"
    WORKFLOW_END = "workflow_end"
    WORKFLOW_INTERRUPTED = "workflow_interrupted"
    WORKFLOW_ERROR = "workflow_error"
    NODE_START = "node_start"
    NODE_END = "node_end"
    EDGE_SELECTED = "edge_selected"


@dataclass
class WorkflowEvent:
    type: WorkflowEventType
    workflow_id: str
    node_id: Optional[str] = None
    state: Optional[WorkflowState] = None
    data: Dict[str, Any] = field(default_factory=dict)
    duration_ms: Optional[int] = None
    error: Optional[BaseException] = None


EventHandler = Callable[[WorkflowEvent], None]


class EventDispatcher:
    """Route events to the handlers subscribed to their type."""

    def __init__(self) -> None:
        self._handlers: Dict[WorkflowEventType, List[EventHandler]] = {
            event_type: [] for event_type in WorkflowEventType
        }

    def subscribe(self, event_type: WorkflowEventType, handler: EventHandler) -> None:
        self._handlers[WorkflowEventType(event_type)].append(handler)

    def subscribe_all(self, handler: EventHandler) -> None:
        for handlers in self._handlers.values():
            handlers.append(handler)

    def unsubscribe(self, event_type: WorkflowEventType, handler: EventHandler) -> None:
        handlers = self._handlers[WorkflowEventType(event_type)]
        if handler in handlers:
            handlers.remove(handler)

    def has_handlers(self, event_type: WorkflowEventType) -> bool:
        return bool(self._handlers[event_type])

    def emit(self, event: WorkflowEvent) -> None:
        for handler in list(self._handlers[event.type]):
            handler(event)
