"""
Exception types for agentflow.

Three outcomes of a workflow call must stay distinguishable by callers:

    - ``WorkflowInterrupted`` — the workflow is waiting for external input.
      It is a persisted suspension, not a subclass of ``AgentflowError``.
    - ``WorkflowError`` subclasses — the workflow itself is broken
      (bad graph, no eligible edge, persistence failure, ...).
    - Anything else — raised by node logic and propagated unmodified.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

if TYPE_CHECKING:
    from agentflow.workflow.workflow_model import WorkflowInterrupt
    from agentflow.workflow.workflow_state import WorkflowState


class AgentflowError(Exception):
    """Base class for all agentflow errors."""


class WorkflowError(AgentflowError):
    """Base class for workflow engine errors."""


class WorkflowConfigurationError(WorkflowError):
    """The workflow graph is malformed (missing start/end, dangling edges...)."""


class WorkflowTraversalError(WorkflowError):
    """Execution could not continue (no eligible edge, step limit reached)."""


class InvalidNodeOutputError(WorkflowError):
    """A node returned something other than a state or an outcome."""


class PersistenceError(WorkflowError):
    """The persistence backend is unavailable or holds a corrupted record."""


class InterruptNotFoundError(PersistenceError):
    """No interrupt is stored for the requested workflow ID."""

    def __init__(self, workflow_id: str) -> None:
        super().__init__(f"No saved workflow found for ID: {workflow_id}.")
        self.workflow_id = workflow_id


class StateSerializationError(PersistenceError):
    """A state value could not be encoded or decoded."""


class ChatHistoryError(AgentflowError):
    """Chat history storage problem."""


class WorkflowInterrupted(Exception):
    """Raised out of ``run``/``resume`` when a node suspends the workflow.

    The interrupt has already been persisted when this is raised; pass
    ``workflow_id`` back to ``Workflow.resume`` to continue.
    """

    def __init__(self, interrupt: "WorkflowInterrupt", workflow_id: str) -> None:
        super().__init__(interrupt.message)
        self.interrupt = interrupt
        self.workflow_id = workflow_id

    @property
    def data(self) -> Dict[str, Any]:
        return self.interrupt.data

    @property
    def current_node(self) -> str:
        return self.interrupt.current_node

    @property
    def state(self) -> "WorkflowState":
        return self.interrupt.state
