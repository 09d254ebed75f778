"""
Workflow Nodes Package.

Exposes the node contract: ``BaseNode``, the ``Continue`` / ``Suspend``
outcomes and the ``FunctionNode`` adapter for plain callables.
"""

from agentflow.workflow.nodes.base import (
    BaseNode,
    Continue,
    FunctionNode,
    NodeContext,
    NodeOutcome,
    NodeResult,
    Suspend,
    node_identifier,
)

__all__ = [
    "BaseNode",
    "Continue",
    "FunctionNode",
    "NodeContext",
    "NodeOutcome",
    "NodeResult",
    "Suspend",
    "node_identifier",
]
