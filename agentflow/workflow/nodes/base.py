"""
Node contract — the unit of work executed by a ``Workflow``.

A node receives the current ``WorkflowState`` and a ``NodeContext`` and
returns one of:

    - ``Continue(state)`` — proceed along the graph with ``state``
    - ``Suspend(payload, state)`` — pause for external input
    - a bare ``WorkflowState`` — shorthand for ``Continue(state)``

``execute`` may be a plain method or ``async def``; the orchestrator
awaits coroutine results before evaluating any edge.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, ClassVar, Dict, Optional, Union

from agentflow.workflow.workflow_state import WorkflowState


@dataclass(frozen=True)
class NodeContext:
    """Per-call execution context handed to ``execute``.

    ``resume_data`` is only set when the node is re-entered by
    ``Workflow.resume`` after it suspended.
    """

    workflow_id: str
    node_id: str
    resume_data: Optional[Dict[str, Any]] = None

    @property
    def is_resuming(self) -> bool:
        return self.resume_data is not None


@dataclass(frozen=True)
class Continue:
    state: WorkflowState


@dataclass(frozen=True)
class Suspend:
    """Request a human-in-the-loop pause.

    ``state`` is the snapshot to persist; when omitted the state the node
    was called with is used.
    """

    payload: Dict[str, Any] = field(default_factory=dict)
    state: Optional[WorkflowState] = None


NodeOutcome = Union[Continue, Suspend]
NodeResult = Union[NodeOutcome, WorkflowState, Awaitable[Union[NodeOutcome, WorkflowState]]]


class BaseNode(ABC):
    """Base class for workflow nodes.

    The identifier used in edges defaults to the class name; set the
    ``node_id`` class attribute to pick another one. An instance
    registered with ``add_node(node, node_id=...)`` resolves to that id
    from then on, so it can be wired by object as well as by string.
    """

    node_id: ClassVar[Optional[str]] = None
    description: ClassVar[str] = ""

    _assigned_id: Optional[str] = None

    @abstractmethod
    def execute(self, state: WorkflowState, context: NodeContext) -> NodeResult:
        """Run the node against ``state``."""

    # ── Outcome helpers ──

    def proceed(self, state: WorkflowState) -> Continue:
        return Continue(state)

    def suspend(
        self,
        payload: Optional[Dict[str, Any]] = None,
        state: Optional[WorkflowState] = None,
    ) -> Suspend:
        return Suspend(payload=dict(payload or {}), state=state)

    @classmethod
    def default_id(cls) -> str:
        return cls.node_id or cls.__name__

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.identifier!r}>"

    @property
    def identifier(self) -> str:
        return self._assigned_id or self.default_id()

    @property
    def assigned_id(self) -> Optional[str]:
        """Identifier pinned by ``Workflow.add_node(node, node_id=...)``."""
        return self._assigned_id

    def assign_id(self, node_id: str) -> None:
        self._assigned_id = node_id


class FunctionNode(BaseNode):
    """Adapt a plain callable ``(state, context) -> outcome`` into a node."""

    def __init__(
        self,
        func: Callable[[WorkflowState, NodeContext], NodeResult],
        node_id: Optional[str] = None,
    ) -> None:
        if not callable(func):
            raise TypeError("FunctionNode requires a callable")
        self._func = func
        self._func_name = getattr(func, "__name__", type(func).__name__)
        self._assigned_id = node_id
        self.description = inspect.getdoc(func) or ""

    @property
    def identifier(self) -> str:
        return self._assigned_id or self._func_name

    def execute(self, state: WorkflowState, context: NodeContext) -> NodeResult:
        return self._func(state, context)


def node_identifier(node: Any) -> str:
    """Resolve an identifier from an ID string, node instance or node class."""
    if isinstance(node, str):
        return node
    if isinstance(node, BaseNode):
        return node.identifier
    if isinstance(node, type) and issubclass(node, BaseNode):
        return node.default_id()
    raise TypeError(
        f"Expected a node identifier, node or node class, got {type(node).__name__}"
    )
