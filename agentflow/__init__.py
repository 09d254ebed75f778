"""
agentflow — graph workflows with human-in-the-loop interrupts.

    from agentflow import Workflow, Edge, WorkflowState, WorkflowInterrupted
"""

from agentflow.exceptions import (
    AgentflowError,
    ChatHistoryError,
    InterruptNotFoundError,
    InvalidNodeOutputError,
    PersistenceError,
    StateSerializationError,
    WorkflowConfigurationError,
    WorkflowError,
    WorkflowInterrupted,
    WorkflowTraversalError,
)
from agentflow.workflow import (
    BaseNode,
    Continue,
    Edge,
    FilePersistence,
    FunctionNode,
    InMemoryPersistence,
    MermaidExporter,
    NodeContext,
    PersistenceInterface,
    SQLitePersistence,
    Suspend,
    Workflow,
    WorkflowInterrupt,
    WorkflowState,
)

__version__ = "0.1.0"

__all__ = [
    "AgentflowError",
    "ChatHistoryError",
    "InterruptNotFoundError",
    "InvalidNodeOutputError",
    "PersistenceError",
    "StateSerializationError",
    "WorkflowConfigurationError",
    "WorkflowError",
    "WorkflowInterrupted",
    "WorkflowTraversalError",
    "BaseNode",
    "Continue",
    "Edge",
    "FilePersistence",
    "FunctionNode",
    "InMemoryPersistence",
    "MermaidExporter",
    "NodeContext",
    "PersistenceInterface",
    "SQLitePersistence",
    "Suspend",
    "Workflow",
    "WorkflowInterrupt",
    "WorkflowState",
]
