"""
Workflow Inspector — static report of a workflow graph.

Produces the same view the orchestrator has of a graph without running
it: per-node details, per-edge details, reachability from the start
node, and dead ends (non-end nodes without an outgoing edge) that would
fail traversal at runtime.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Any, Dict, List, Set

from agentflow.workflow.workflow_model import Edge

if TYPE_CHECKING:
    from agentflow.workflow.workflow_executor import Workflow


# ====================================================================
# Public API
# ====================================================================


def inspect_workflow(workflow: "Workflow") -> Dict[str, Any]:
    """Inspect a workflow and produce a structural report.

    Returns a dict containing:
        - ``nodes``      : Per-node detail list (registration order)
        - ``edges``      : Per-edge detail list (insertion order)
        - ``summary``    : High-level stats
        - ``validation`` : Validation errors plus reachability warnings
    """
    errors = workflow.validation_errors()
    nodes = workflow.get_nodes()
    edges = workflow.get_edges()
    start = workflow.get_start()
    end = workflow.get_end()

    edges_by_source: Dict[str, List[Edge]] = {}
    positions: List[int] = []
    for edge in edges:
        siblings = edges_by_source.setdefault(edge.source, [])
        positions.append(len(siblings))
        siblings.append(edge)

    reachable = _reachable_from(start, edges_by_source) if start in nodes else set()
    unreachable = [n for n in nodes if n not in reachable]
    dead_ends = [
        n for n in nodes if n != end and not edges_by_source.get(n)
    ]

    node_details = []
    for node_id, node in nodes.items():
        outgoing = edges_by_source.get(node_id, [])
        if node_id == start:
            role = "start"
        elif node_id == end:
            role = "end"
        else:
            role = "processor"
        node_details.append({
            "id": node_id,
            "class": type(node).__name__,
            "description": node.description,
            "role": role,
            "reachable": node_id in reachable,
            "targets": [e.target for e in outgoing],
            "has_conditional_edges": any(e.is_conditional for e in outgoing),
        })

    edge_details = []
    for index, edge in enumerate(edges):
        # Edges after an unconditional one from the same source are never taken
        siblings = edges_by_source.get(edge.source, [])
        position = positions[index]
        shadowed = any(not e.is_conditional for e in siblings[:position])
        edge_details.append({
            "index": index,
            "source": edge.source,
            "target": edge.target,
            "label": edge.label,
            "wiring": "conditional" if edge.is_conditional else "simple",
            "priority": position,
            "shadowed": shadowed,
        })

    warnings: List[str] = []
    for node_id in unreachable:
        warnings.append(f"Node '{node_id}' is not reachable from the start node")
    for node_id in dead_ends:
        warnings.append(f"Node '{node_id}' has no outgoing edge")
    for detail in edge_details:
        if detail["shadowed"]:
            warnings.append(
                f"Edge {detail['source']} -> {detail['target']} is never taken "
                f"(an earlier unconditional edge from '{detail['source']}' wins)"
            )

    return {
        "nodes": node_details,
        "edges": edge_details,
        "summary": {
            "workflow_id": workflow.workflow_id,
            "start": start,
            "end": end,
            "total_nodes": len(nodes),
            "total_edges": len(edges),
            "conditional_edges": sum(1 for e in edges if e.is_conditional),
            "simple_edges": sum(1 for e in edges if not e.is_conditional),
            "is_valid": not errors,
        },
        "validation": {
            "valid": not errors,
            "errors": errors,
            "warnings": warnings,
        },
    }


def _reachable_from(start: str, edges_by_source: Dict[str, List[Edge]]) -> Set[str]:
    seen = {start}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        for edge in edges_by_source.get(current, []):
            if edge.target not in seen:
                seen.add(edge.target)
                queue.append(edge.target)
    return seen
