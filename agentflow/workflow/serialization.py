"""
State Serialization — JSON-safe encoding of workflow state values.

Persisted interrupts must reconstruct their state exactly, including
opaque collaborator objects such as chat histories. Those objects opt in
through the ``SerializableValue`` capability (``to_bytes`` /
``from_bytes``) and are looked up by tag when decoding; the codec never
walks the attributes of arbitrary objects.

Encoded forms:
    - ``None``, ``bool``, ``int``, finite ``float``, ``str`` — unchanged
    - ``inf`` / ``-inf`` / ``nan`` — ``{"__agentflow__": "float", "value": "inf"}``
    - ``list`` — list of encoded items
    - ``dict`` with ``str`` keys — dict of encoded values
    - tuples, other dicts — ``{"__agentflow__": "tuple" | "dict", ...}``
    - LangChain ``BaseMessage`` — ``{"__agentflow__": "message", ...}``
    - ``SerializableValue`` — ``{"__agentflow__": "object", "type": tag, "data": b64}``
"""

from __future__ import annotations

import base64
import binascii
import importlib
import math
from abc import ABC, abstractmethod
from logging import getLogger
from typing import Any, ClassVar, Dict, Optional, Type, TypeVar

from langchain_core.messages import BaseMessage, message_to_dict, messages_from_dict

from agentflow.exceptions import StateSerializationError
from agentflow.workflow.workflow_state import WorkflowState

logger = getLogger(__name__)

MARKER = "__agentflow__"

_SCALARS = (str, int, float, bool, type(None))


class SerializableValue(ABC):
    """Capability for stateful objects stored inside a ``WorkflowState``.

    Subclasses must also be registered with ``@register_serializable``
    so that the decoder can find them again.
    """

    serialization_tag: ClassVar[str] = ""

    @abstractmethod
    def to_bytes(self) -> bytes:
        """Serialize the object to bytes."""

    @classmethod
    @abstractmethod
    def from_bytes(cls, data: bytes) -> "SerializableValue":
        """Rebuild an equivalent object from ``to_bytes`` output."""


S = TypeVar("S", bound=Type[SerializableValue])

_registry: Dict[str, Type[SerializableValue]] = {}


def register_serializable(cls: S) -> S:
    """Class decorator registering a ``SerializableValue`` under its tag.

    The tag defaults to ``"<module>:<qualname>"``; the module part lets a
    fresh process import the class on first decode.
    """
    if not issubclass(cls, SerializableValue):
        raise TypeError(f"{cls.__name__} must subclass SerializableValue")
    if not cls.__dict__.get("serialization_tag"):
        cls.serialization_tag = f"{cls.__module__}:{cls.__qualname__}"
    existing = _registry.get(cls.serialization_tag)
    if existing is not None and existing is not cls:
        logger.warning(
            f"Serializable tag '{cls.serialization_tag}' re-registered "
            f"by {cls.__module__}.{cls.__qualname__}"
        )
    _registry[cls.serialization_tag] = cls
    return cls


def get_serializable(tag: str) -> Optional[Type[SerializableValue]]:
    """Look up a registered class, importing its module once if needed."""
    cls = _registry.get(tag)
    if cls is not None:
        return cls
    module_name, sep, _ = tag.partition(":")
    if not sep:
        return None
    try:
        importlib.import_module(module_name)
    except ImportError:
        return None
    return _registry.get(tag)


# ============================================================================
# Encoding
# ============================================================================


def encode_value(value: Any, path: str = "$") -> Any:
    """Encode ``value`` into a JSON-compatible structure."""
    if isinstance(value, float) and not math.isfinite(value):
        return {MARKER: "float", "value": repr(value)}

    if isinstance(value, _SCALARS):
        return value

    if isinstance(value, list):
        return [encode_value(v, f"{path}[{i}]") for i, v in enumerate(value)]

    if isinstance(value, tuple):
        return {
            MARKER: "tuple",
            "items": [encode_value(v, f"{path}[{i}]") for i, v in enumerate(value)],
        }

    if isinstance(value, dict):
        if all(isinstance(k, str) for k in value) and MARKER not in value:
            return {k: encode_value(v, f"{path}.{k}") for k, v in value.items()}
        return {
            MARKER: "dict",
            "items": [
                [encode_value(k, f"{path}<key>"), encode_value(v, f"{path}[{k!r}]")]
                for k, v in value.items()
            ],
        }

    if isinstance(value, WorkflowState):
        return {MARKER: "state", "data": encode_value(value.all(), path)}

    if isinstance(value, BaseMessage):
        return {MARKER: "message", "data": message_to_dict(value)}

    if isinstance(value, SerializableValue):
        tag = type(value).serialization_tag
        if not tag or _registry.get(tag) is not type(value):
            raise StateSerializationError(
                f"{type(value).__name__} at '{path}' is not registered; "
                f"decorate it with @register_serializable"
            )
        try:
            raw = value.to_bytes()
        except Exception as e:
            raise StateSerializationError(
                f"Failed to serialize {type(value).__name__} at '{path}': {e}"
            ) from e
        return {
            MARKER: "object",
            "type": tag,
            "data": base64.b64encode(raw).decode("ascii"),
        }

    raise StateSerializationError(
        f"Value of type {type(value).__name__} at '{path}' is not serializable"
    )


def encode_state(state: WorkflowState) -> Dict[str, Any]:
    return encode_value(state.all())


# ============================================================================
# Decoding
# ============================================================================


def decode_value(payload: Any) -> Any:
    """Inverse of ``encode_value``."""
    if isinstance(payload, _SCALARS):
        return payload

    if isinstance(payload, list):
        return [decode_value(v) for v in payload]

    if not isinstance(payload, dict):
        raise StateSerializationError(
            f"Unexpected encoded value of type {type(payload).__name__}"
        )

    kind = payload.get(MARKER)
    if kind is None:
        return {k: decode_value(v) for k, v in payload.items()}

    if kind == "tuple":
        return tuple(decode_value(v) for v in payload["items"])

    if kind == "float":
        try:
            return float(payload["value"])
        except (KeyError, TypeError, ValueError) as e:
            raise StateSerializationError(f"Corrupted float payload: {e}") from e

    if kind == "dict":
        items = payload.get("items")
        if not isinstance(items, list) or not all(
            isinstance(item, list) and len(item) == 2 for item in items
        ):
            raise StateSerializationError(
                "Corrupted dict payload: expected a list of [key, value] pairs"
            )
        try:
            return {decode_value(k): decode_value(v) for k, v in items}
        except TypeError as e:
            raise StateSerializationError(f"Corrupted dict payload: {e}") from e

    if kind == "state":
        return WorkflowState(decode_value(payload["data"]))

    if kind == "message":
        try:
            return messages_from_dict([payload["data"]])[0]
        except (KeyError, ValueError) as e:
            raise StateSerializationError(f"Corrupted message payload: {e}") from e

    if kind == "object":
        tag = payload.get("type", "")
        cls = get_serializable(tag)
        if cls is None:
            raise StateSerializationError(f"Unknown serializable type '{tag}'")
        try:
            raw = base64.b64decode(payload["data"], validate=True)
        except (binascii.Error, KeyError, TypeError) as e:
            raise StateSerializationError(f"Corrupted payload for '{tag}': {e}") from e
        try:
            return cls.from_bytes(raw)
        except StateSerializationError:
            raise
        except Exception as e:
            raise StateSerializationError(f"Failed to restore '{tag}': {e}") from e

    raise StateSerializationError(f"Unknown encoded kind '{kind}'")


def decode_state(payload: Dict[str, Any]) -> WorkflowState:
    data = decode_value(payload)
    if not isinstance(data, dict):
        raise StateSerializationError("Encoded state must be a mapping")
    return WorkflowState(data)
