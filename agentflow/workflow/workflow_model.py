"""
Workflow Data Models — edges and interrupt records.

``Edge`` describes a directed, optionally conditional transition between
two registered nodes. ``WorkflowInterrupt`` is the durable record of
where a suspended workflow stopped; persistence backends store it and
``Workflow.resume`` reads it back.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from agentflow.workflow.nodes.base import node_identifier
from agentflow.workflow.serialization import (
    decode_state,
    decode_value,
    encode_state,
    encode_value,
)
from agentflow.workflow.workflow_state import WorkflowState

EdgeCondition = Callable[[WorkflowState], Any]

DEFAULT_INTERRUPT_MESSAGE = "Workflow interrupted for human input"


class Edge:
    """A directed edge ``source -> target``.

    ``source`` and ``target`` accept an identifier, a node instance or a
    node class. Without a ``condition`` the edge is always eligible.
    """

    def __init__(
        self,
        source: Any,
        target: Any,
        condition: Optional[EdgeCondition] = None,
        label: str = "",
    ) -> None:
        self.source: str = node_identifier(source)
        self.target: str = node_identifier(target)
        self.condition = condition
        self.label = label

    @property
    def is_conditional(self) -> bool:
        return self.condition is not None

    def should_execute(self, state: WorkflowState) -> bool:
        if self.condition is None:
            return True
        return bool(self.condition(state))

    def __repr__(self) -> str:
        arrow = "-?->" if self.is_conditional else "-->"
        return f"Edge({self.source} {arrow} {self.target})"


class WorkflowInterrupt:
    """Suspension record: payload, interrupted node and state snapshot."""

    def __init__(
        self,
        data: Dict[str, Any],
        current_node: str,
        state: WorkflowState,
        message: str = DEFAULT_INTERRUPT_MESSAGE,
    ) -> None:
        self.data = data
        self.current_node = current_node
        self.state = state
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Encode into a JSON-compatible mapping."""
        return {
            "message": self.message,
            "data": encode_value(self.data, "$.data"),
            "current_node": self.current_node,
            "state": encode_state(self.state),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "WorkflowInterrupt":
        return cls(
            data=decode_value(payload.get("data", {})),
            current_node=payload["current_node"],
            state=decode_state(payload.get("state", {})),
            message=payload.get("message", DEFAULT_INTERRUPT_MESSAGE),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorkflowInterrupt):
            return NotImplemented
        return (
            self.data == other.data
            and self.current_node == other.current_node
            and self.state == other.state
            and self.message == other.message
        )

    def __repr__(self) -> str:
        return (
            f"WorkflowInterrupt(current_node={self.current_node!r}, "
            f"data={self.data!r})"
        )
