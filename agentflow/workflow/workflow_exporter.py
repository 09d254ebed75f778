"""
Workflow Exporters — render a workflow graph as a diagram.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Set

if TYPE_CHECKING:
    from agentflow.workflow.workflow_executor import Workflow


class ExporterInterface(ABC):
    @abstractmethod
    def export(self, workflow: "Workflow") -> str:
        """Render ``workflow`` to a string."""


class MermaidExporter(ExporterInterface):
    """Render a Mermaid flowchart (``graph TD``).

    Edges keep insertion order. Unconditional edges use ``-->``,
    conditional ones ``-.->``; edge labels are rendered as ``|label|``.
    """

    def __init__(self, direction: str = "TD") -> None:
        self.direction = direction

    def export(self, workflow: "Workflow") -> str:
        lines: List[str] = [f"graph {self.direction}"]
        connected: Set[str] = set()

        for edge in workflow.get_edges():
            arrow = "-.->" if edge.is_conditional else "-->"
            if edge.label:
                arrow = f"{arrow}|{_escape(edge.label)}|"
            lines.append(f"    {edge.source} {arrow} {edge.target}")
            connected.update((edge.source, edge.target))

        for node_id in workflow.get_nodes():
            if node_id not in connected:
                lines.append(f"    {node_id}")

        return "\n".join(lines)


def _escape(label: str) -> str:
    return label.replace("|", "/").replace('"', "'")
