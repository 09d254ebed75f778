"""
Workflow Executor — the graph orchestrator.

``Workflow`` owns the node registry, the edge list and the start/end
markers. ``run`` walks the graph node by node, following the first
eligible outgoing edge after each step, until the end node completes.

A node may suspend the run (human-in-the-loop). The orchestrator then
persists a ``WorkflowInterrupt`` under the workflow ID and raises
``WorkflowInterrupted``; ``resume`` loads that record, re-enters the
interrupted node with the caller's resume data and carries on.

Usage::

    workflow = (
        Workflow(persistence=FilePersistence("/var/lib/flows"), workflow_id="order-42")
        .add_nodes([ReviewNode(), ApproveNode()])
        .add_edge(Edge(ReviewNode, ApproveNode))
        .set_start(ReviewNode)
        .set_end(ApproveNode)
    )
    try:
        state = workflow.run({"order": 42})
    except WorkflowInterrupted as interrupted:
        ask_human(interrupted.data)
        state = workflow.resume(resume_data={"status": "approved"})
"""

from __future__ import annotations

import asyncio
import inspect
import time
import uuid
from logging import getLogger
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    TypeVar,
    Union,
)

from agentflow.exceptions import (
    InvalidNodeOutputError,
    WorkflowConfigurationError,
    WorkflowInterrupted,
    WorkflowTraversalError,
)
from agentflow.workflow.nodes.base import (
    BaseNode,
    Continue,
    FunctionNode,
    NodeContext,
    NodeOutcome,
    Suspend,
    node_identifier,
)
from agentflow.workflow.persistence.base import PersistenceInterface
from agentflow.workflow.persistence.memory_persistence import InMemoryPersistence
from agentflow.workflow.workflow_events import (
    EventDispatcher,
    WorkflowEvent,
    WorkflowEventType,
)
from agentflow.workflow.workflow_exporter import ExporterInterface, MermaidExporter
from agentflow.workflow.workflow_model import Edge, WorkflowInterrupt
from agentflow.workflow.workflow_state import WorkflowState

if TYPE_CHECKING:
    from agentflow.config import WorkflowSettings

logger = getLogger(__name__)

T = TypeVar("T")

StateLike = Union[WorkflowState, Mapping[str, Any], None]


class Workflow:
    """Directed graph of nodes executed with conditional transitions.

    Args:
        persistence: Interrupt store (defaults to ``InMemoryPersistence``).
        workflow_id: Key under which interrupts are persisted
            (defaults to a random hex ID).
        exporter: Diagram exporter (defaults to ``MermaidExporter``).
        max_steps: Optional cap on node executions per run/resume.
        log_events: Attach a ``WorkflowLogger`` to ``events``.
    """

    def __init__(
        self,
        persistence: Optional[PersistenceInterface] = None,
        workflow_id: Optional[str] = None,
        exporter: Optional[ExporterInterface] = None,
        max_steps: Optional[int] = None,
        log_events: bool = True,
    ) -> None:
        self._persistence = persistence or InMemoryPersistence()
        self._workflow_id = workflow_id or uuid.uuid4().hex
        self._exporter = exporter or MermaidExporter()
        self._max_steps = max_steps if max_steps and max_steps > 0 else None
        self._nodes: Dict[str, BaseNode] = {}
        self._edges: List[Edge] = []
        self._start: Optional[str] = None
        self._end: Optional[str] = None
        self.events = EventDispatcher()

        if log_events:
            from agentflow.logging.workflow_logger import WorkflowLogger
            WorkflowLogger().attach(self.events)

    @classmethod
    def from_settings(
        cls,
        settings: Optional["WorkflowSettings"] = None,
        workflow_id: Optional[str] = None,
        exporter: Optional[ExporterInterface] = None,
    ) -> "Workflow":
        """Build a workflow wired to the configured persistence backend."""
        from agentflow.config import WorkflowSettings, create_persistence

        settings = settings or WorkflowSettings.get_default_instance()
        return cls(
            persistence=create_persistence(settings),
            workflow_id=workflow_id,
            exporter=exporter,
            max_steps=settings.max_steps,
            log_events=settings.log_events,
        )

    # ========================================================================
    # Graph definition
    # ========================================================================

    def add_node(
        self,
        node: Union[BaseNode, Callable[..., Any]],
        node_id: Optional[str] = None,
    ) -> "Workflow":
        """Register a node (or a plain callable) under its identifier."""
        if not isinstance(node, BaseNode):
            if isinstance(node, type) or not callable(node):
                raise WorkflowConfigurationError(
                    f"Cannot register {node!r}: expected a BaseNode instance or a callable"
                )
            node = FunctionNode(node, node_id)
        if node_id is not None and node.assigned_id not in (None, node_id):
            raise WorkflowConfigurationError(
                f"Node instance is already registered as '{node.assigned_id}'"
            )
        key = node_id or node.identifier
        if key in self._nodes:
            raise WorkflowConfigurationError(f"Node '{key}' is already registered")
        if node_id is not None:
            node.assign_id(node_id)
        self._nodes[key] = node
        return self

    def add_nodes(self, nodes: Iterable[Union[BaseNode, Callable[..., Any]]]) -> "Workflow":
        for node in nodes:
            self.add_node(node)
        return self

    def add_edge(self, edge: Edge) -> "Workflow":
        self._edges.append(edge)
        return self

    def add_edges(self, edges: Iterable[Edge]) -> "Workflow":
        self._edges.extend(edges)
        return self

    def set_start(self, node: Any) -> "Workflow":
        self._start = node_identifier(node)
        return self

    def set_end(self, node: Any) -> "Workflow":
        self._end = node_identifier(node)
        return self

    def set_exporter(self, exporter: ExporterInterface) -> "Workflow":
        self._exporter = exporter
        return self

    # ── Accessors ──

    @property
    def workflow_id(self) -> str:
        return self._workflow_id

    @property
    def persistence(self) -> PersistenceInterface:
        return self._persistence

    def get_nodes(self) -> Dict[str, BaseNode]:
        return dict(self._nodes)

    def get_edges(self) -> List[Edge]:
        return list(self._edges)

    def get_edges_from(self, node_id: str) -> List[Edge]:
        return [e for e in self._edges if e.source == node_id]

    def get_start(self) -> Optional[str]:
        return self._start

    def get_end(self) -> Optional[str]:
        return self._end

    def export(self) -> str:
        return self._exporter.export(self)

    def is_suspended(self, workflow_id: Optional[str] = None) -> bool:
        return self._persistence.exists(workflow_id or self._workflow_id)

    # ========================================================================
    # Validation
    # ========================================================================

    def validation_errors(self) -> List[str]:
        """Return every structural problem of the graph (empty = valid)."""
        errors: List[str] = []
        if self._start is None:
            errors.append("Start node must be defined")
        if self._end is None:
            errors.append("End node must be defined")
        if self._start is not None and self._start not in self._nodes:
            errors.append(f"Start node '{self._start}' does not exist")
        if self._end is not None and self._end not in self._nodes:
            errors.append(f"End node '{self._end}' does not exist")
        for edge in self._edges:
            if edge.source not in self._nodes:
                errors.append(f"Edge from node '{edge.source}' does not exist")
            if edge.target not in self._nodes:
                errors.append(f"Edge to node '{edge.target}' does not exist")
        return errors

    def validate(self) -> None:
        """Raise ``WorkflowConfigurationError`` for the first problem found."""
        errors = self.validation_errors()
        if errors:
            error = WorkflowConfigurationError(errors[0])
            error.errors = errors
            raise error

    # ========================================================================
    # Execution
    # ========================================================================

    def run(self, initial_state: StateLike = None) -> WorkflowState:
        """Synchronous form of ``arun``."""
        return _run_sync(lambda: self.arun(initial_state))

    def resume(
        self,
        workflow_id: Optional[str] = None,
        resume_data: Optional[Dict[str, Any]] = None,
    ) -> WorkflowState:
        """Synchronous form of ``aresume``."""
        return _run_sync(lambda: self.aresume(workflow_id, resume_data))

    async def arun(self, initial_state: StateLike = None) -> WorkflowState:
        """Execute the graph from the start node to the end node.

        Raises:
            WorkflowConfigurationError: The graph is malformed.
            WorkflowTraversalError: No eligible edge / step limit reached.
            WorkflowInterrupted: A node suspended; the interrupt is persisted.
        """
        self.validate()
        state = _as_state(initial_state)
        logger.info(f"[{self._workflow_id}] Running workflow from '{self._start}'")
        self._emit(
            WorkflowEventType.WORKFLOW_START,
            self._workflow_id,
            node_id=self._start,
            state=state,
        )
        return await self._traverse(self._workflow_id, self._start, state)

    async def aresume(
        self,
        workflow_id: Optional[str] = None,
        resume_data: Optional[Dict[str, Any]] = None,
    ) -> WorkflowState:
        """Continue a suspended workflow from its interrupted node.

        The interrupted node is executed again with ``resume_data`` in its
        ``NodeContext``. The persisted interrupt is deleted once the end
        node completes; a new suspension overwrites it.

        Raises:
            InterruptNotFoundError: Nothing is persisted for the workflow ID.
        """
        self.validate()
        workflow_id = workflow_id or self._workflow_id
        interrupt = self._persistence.load(workflow_id)
        node_id = interrupt.current_node
        if node_id not in self._nodes:
            raise WorkflowConfigurationError(
                f"Interrupted node '{node_id}' does not exist"
            )

        resume_data = dict(resume_data) if resume_data is not None else {}
        logger.info(f"[{workflow_id}] Resuming workflow at '{node_id}'")
        self._emit(
            WorkflowEventType.WORKFLOW_RESUME,
            workflow_id,
            node_id=node_id,
            state=interrupt.state,
            data={"resume_keys": list(resume_data)},
        )

        state = await self._traverse(
            workflow_id, node_id, interrupt.state, resume_data=resume_data
        )
        self._persistence.delete(workflow_id)
        return state

    # ========================================================================
    # Internal helpers
    # ========================================================================

    async def _traverse(
        self,
        workflow_id: str,
        node_id: str,
        state: WorkflowState,
        resume_data: Optional[Dict[str, Any]] = None,
    ) -> WorkflowState:
        steps = 0
        try:
            while True:
                steps += 1
                if self._max_steps is not None and steps > self._max_steps:
                    raise WorkflowTraversalError(
                        f"Workflow exceeded {self._max_steps} steps"
                    )

                outcome = await self._execute_node(
                    workflow_id, node_id, state, resume_data
                )
                resume_data = None

                if isinstance(outcome, Suspend):
                    snapshot = outcome.state if outcome.state is not None else state
                    raise self._suspend(workflow_id, node_id, outcome.payload, snapshot)

                state = outcome.state
                if node_id == self._end:
                    self._emit(
                        WorkflowEventType.WORKFLOW_END,
                        workflow_id,
                        node_id=node_id,
                        state=state,
                        data={"steps": steps},
                    )
                    return state

                node_id = self._next_node(workflow_id, node_id, state)

        except WorkflowInterrupted:
            raise
        except Exception as e:
            self._emit(
                WorkflowEventType.WORKFLOW_ERROR,
                workflow_id,
                node_id=node_id,
                state=state,
                error=e,
            )
            raise

    async def _execute_node(
        self,
        workflow_id: str,
        node_id: str,
        state: WorkflowState,
        resume_data: Optional[Dict[str, Any]],
    ) -> NodeOutcome:
        node = self._nodes[node_id]
        context = NodeContext(
            workflow_id=workflow_id, node_id=node_id, resume_data=resume_data
        )
        self._emit(
            WorkflowEventType.NODE_START, workflow_id, node_id=node_id, state=state
        )

        start = time.time()
        result = node.execute(state, context)
        if inspect.isawaitable(result):
            result = await result
        duration_ms = int((time.time() - start) * 1000)

        outcome = _as_outcome(node_id, result)
        self._emit(
            WorkflowEventType.NODE_END,
            workflow_id,
            node_id=node_id,
            state=outcome.state,
            duration_ms=duration_ms,
            data={"suspended": isinstance(outcome, Suspend)},
        )
        return outcome

    def _suspend(
        self,
        workflow_id: str,
        node_id: str,
        payload: Dict[str, Any],
        snapshot: WorkflowState,
    ) -> WorkflowInterrupted:
        """Persist the interrupt and build the exception to raise."""
        interrupt = WorkflowInterrupt(dict(payload), node_id, snapshot)
        self._persistence.save(workflow_id, interrupt)
        self._emit(
            WorkflowEventType.WORKFLOW_INTERRUPTED,
            workflow_id,
            node_id=node_id,
            state=snapshot,
            data={"payload": interrupt.data},
        )
        return WorkflowInterrupted(interrupt, workflow_id)

    def _next_node(self, workflow_id: str, node_id: str, state: WorkflowState) -> str:
        """First edge out of ``node_id`` (insertion order) that is eligible."""
        for edge in self._edges:
            if edge.source == node_id and edge.should_execute(state):
                self._emit(
                    WorkflowEventType.EDGE_SELECTED,
                    workflow_id,
                    node_id=node_id,
                    data={"target": edge.target, "conditional": edge.is_conditional},
                )
                return edge.target
        raise WorkflowTraversalError(f"No valid edge found from node '{node_id}'")

    def _emit(self, event_type: WorkflowEventType, workflow_id: str, **fields: Any) -> None:
        if self.events.has_handlers(event_type):
            self.events.emit(WorkflowEvent(type=event_type, workflow_id=workflow_id, **fields))

    def __repr__(self) -> str:
        return (
            f"<Workflow id={self._workflow_id!r} nodes={len(self._nodes)} "
            f"edges={len(self._edges)}>"
        )


def _as_state(value: StateLike) -> WorkflowState:
    """Copy the caller's state so the run never mutates their object."""
    if value is None:
        return WorkflowState()
    if isinstance(value, WorkflowState):
        return value.copy()
    if isinstance(value, Mapping):
        return WorkflowState(value)
    raise TypeError(f"Initial state must be a WorkflowState or mapping, got {type(value).__name__}")


def _as_outcome(node_id: str, result: Any) -> NodeOutcome:
    if isinstance(result, WorkflowState):
        return Continue(result)
    if isinstance(result, Continue):
        if not isinstance(result.state, WorkflowState):
            raise InvalidNodeOutputError(
                f"Node '{node_id}' continued with {type(result.state).__name__}; "
                f"expected WorkflowState"
            )
        return result
    if isinstance(result, Suspend):
        if not isinstance(result.payload, Mapping):
            raise InvalidNodeOutputError(
                f"Node '{node_id}' suspended with a {type(result.payload).__name__} "
                f"payload; expected a mapping"
            )
        if result.state is not None and not isinstance(result.state, WorkflowState):
            raise InvalidNodeOutputError(
                f"Node '{node_id}' suspended with {type(result.state).__name__}; "
                f"expected WorkflowState"
            )
        return result
    raise InvalidNodeOutputError(
        f"Node '{node_id}' returned {type(result).__name__}; "
        f"expected WorkflowState, Continue or Suspend"
    )


def _run_sync(factory: Callable[[], Awaitable[T]]) -> T:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(factory())
    raise RuntimeError(
        "Workflow.run()/resume() cannot be called from a running event loop; "
        "use 'await workflow.arun()' / 'await workflow.aresume()' instead"
    )
