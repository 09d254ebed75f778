"""
Workflow State — the key/value bag threaded through node execution.

Each node receives the current state and hands back the state that
replaces it for the next node. Keys keep their insertion order so that
``all()`` snapshots are stable for export and equality checks.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, Mapping, Optional, Union


class WorkflowState:
    """Ordered mapping of string keys to arbitrary values.

    ``get`` never raises; ``set``/``merge``/``unset`` mutate in place and
    return the same instance so calls can be chained::

        state = WorkflowState({"value": 8})
        state.set("step", "start").set("counter", 0)
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(data) if data else {}

    # ── Access ──

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> "WorkflowState":
        self._data[key] = value
        return self

    def has(self, key: str) -> bool:
        return key in self._data

    def unset(self, key: str) -> "WorkflowState":
        """Remove ``key`` if present."""
        self._data.pop(key, None)
        return self

    def merge(self, other: Union["WorkflowState", Mapping[str, Any]]) -> "WorkflowState":
        """Overwrite keys with those of ``other`` (last wins)."""
        if isinstance(other, WorkflowState):
            other = other.all()
        self._data.update(other)
        return self

    def all(self) -> Dict[str, Any]:
        """Return an ordered shallow snapshot of every key."""
        return dict(self._data)

    def copy(self) -> "WorkflowState":
        """Shallow copy; values themselves are shared."""
        return WorkflowState(self._data)

    # ── Python protocol ──

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WorkflowState):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"WorkflowState({self._data!r})"
