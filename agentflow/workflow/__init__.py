"""
Workflow Engine — graph definition, execution and interrupt/resume.

Architecture:
    nodes/             — BaseNode contract, Continue / Suspend outcomes
    persistence/       — Interrupt storage backends (memory, file, SQLite)
    workflow_state     — Key/value state threaded through nodes
    workflow_model     — Edge and WorkflowInterrupt
    serialization      — Capability-based state codec
    workflow_events    — Typed events emitted during execution
    workflow_executor  — The Workflow orchestrator
    workflow_exporter  — Diagram exporters (Mermaid)
    workflow_inspector — Static graph report
"""

from agentflow.workflow.nodes.base import (
    BaseNode,
    Continue,
    FunctionNode,
    NodeContext,
    Suspend,
)
from agentflow.workflow.persistence import (
    FilePersistence,
    InMemoryPersistence,
    PersistenceInterface,
    SQLitePersistence,
)
from agentflow.workflow.serialization import (
    SerializableValue,
    decode_state,
    encode_state,
    register_serializable,
)
from agentflow.workflow.workflow_events import (
    EventDispatcher,
    WorkflowEvent,
    WorkflowEventType,
)
from agentflow.workflow.workflow_executor import Workflow
from agentflow.workflow.workflow_exporter import ExporterInterface, MermaidExporter
from agentflow.workflow.workflow_inspector import inspect_workflow
from agentflow.workflow.workflow_model import Edge, WorkflowInterrupt
from agentflow.workflow.workflow_state import WorkflowState

__all__ = [
    "BaseNode",
    "Continue",
    "FunctionNode",
    "NodeContext",
    "Suspend",
    "FilePersistence",
    "InMemoryPersistence",
    "PersistenceInterface",
    "SQLitePersistence",
    "SerializableValue",
    "decode_state",
    "encode_state",
    "register_serializable",
    "EventDispatcher",
    "WorkflowEvent",
    "WorkflowEventType",
    "Workflow",
    "ExporterInterface",
    "MermaidExporter",
    "inspect_workflow",
    "Edge",
    "WorkflowInterrupt",
    "WorkflowState",
]
