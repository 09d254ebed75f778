"""
Workflow Logger — log every workflow event through ``logging``.

Attached to each ``Workflow`` by default (see ``WorkflowSettings.log_events``).
Node enter/exit lines carry a compact state summary and the node
duration, mirroring what the engine knows at each step.
"""

from __future__ import annotations

from logging import Logger, getLogger
from typing import Any, Dict, Optional

from agentflow.workflow.workflow_events import (
    EventDispatcher,
    WorkflowEvent,
    WorkflowEventType,
)
from agentflow.workflow.workflow_state import WorkflowState


class WorkflowLogger:
    """Log workflow events to a standard library logger.

    Usage::

        WorkflowLogger().attach(workflow.events)
    """

    def __init__(self, logger: Optional[Logger] = None) -> None:
        self._logger = logger or getLogger("agentflow.workflow")
        self._handlers = {
            WorkflowEventType.WORKFLOW_START: self.on_workflow_start,
            WorkflowEventType.WORKFLOW_RESUME: self.on_workflow_resume,
            WorkflowEventType.WORKFLOW_END: self.on_workflow_end,
            WorkflowEventType.WORKFLOW_INTERRUPTED: self.on_workflow_interrupted,
            WorkflowEventType.WORKFLOW_ERROR: self.on_workflow_error,
            WorkflowEventType.NODE_START: self.on_node_start,
            WorkflowEventType.NODE_END: self.on_node_end,
            WorkflowEventType.EDGE_SELECTED: self.on_edge_selected,
        }

    def attach(self, dispatcher: EventDispatcher) -> "WorkflowLogger":
        for event_type, handler in self._handlers.items():
            dispatcher.subscribe(event_type, handler)
        return self

    def detach(self, dispatcher: EventDispatcher) -> None:
        for event_type, handler in self._handlers.items():
            dispatcher.unsubscribe(event_type, handler)

    # ── Handlers ──

    def on_workflow_start(self, event: WorkflowEvent) -> None:
        self._logger.info(
            f"[{event.workflow_id}] Workflow started at '{event.node_id}' "
            f"{_summarize(event.state)}"
        )

    def on_workflow_resume(self, event: WorkflowEvent) -> None:
        keys = ", ".join(event.data.get("resume_keys", [])) or "-"
        self._logger.info(
            f"[{event.workflow_id}] Workflow resumed at '{event.node_id}' "
            f"(resume data: {keys})"
        )

    def on_workflow_end(self, event: WorkflowEvent) -> None:
        self._logger.info(
            f"[{event.workflow_id}] Workflow completed at '{event.node_id}' "
            f"after {event.data.get('steps', '?')} steps"
        )

    def on_workflow_interrupted(self, event: WorkflowEvent) -> None:
        self._logger.info(
            f"[{event.workflow_id}] Workflow interrupted at '{event.node_id}': "
            f"{event.data.get('payload')}"
        )

    def on_workflow_error(self, event: WorkflowEvent) -> None:
        error = event.error
        self._logger.error(
            f"[{event.workflow_id}] Workflow failed at '{event.node_id}': "
            f"{type(error).__name__ if error else 'Error'}: {error}"
        )

    def on_node_start(self, event: WorkflowEvent) -> None:
        self._logger.debug(
            f"[{event.workflow_id}] → {event.node_id} {_summarize(event.state)}"
        )

    def on_node_end(self, event: WorkflowEvent) -> None:
        self._logger.debug(
            f"[{event.workflow_id}] ← {event.node_id} ({event.duration_ms}ms)"
        )

    def on_edge_selected(self, event: WorkflowEvent) -> None:
        self._logger.debug(
            f"[{event.workflow_id}] {event.node_id} → {event.data.get('target')}"
        )


def _summarize(state: Optional[WorkflowState]) -> str:
    """Compact ``{key: type}`` preview of a state for log lines."""
    if state is None:
        return "{}"
    summary: Dict[str, Any] = {}
    for key, value in state.all().items():
        if isinstance(value, str):
            summary[key] = f"{len(value)} chars" if len(value) > 50 else value
        elif isinstance(value, (list, tuple)):
            summary[key] = f"{len(value)} items"
        elif isinstance(value, dict):
            summary[key] = f"{{...}} ({len(value)} keys)"
        elif isinstance(value, (int, float, bool)) or value is None:
            summary[key] = value
        else:
            summary[key] = type(value).__name__
    return str(summary)
