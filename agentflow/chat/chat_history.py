"""
Chat History — conversation handles that can live inside a workflow state.

Both histories hold LangChain messages and implement the
``SerializableValue`` capability, so a history stored in a
``WorkflowState`` survives an interrupt being persisted and loaded
again. ``FileChatHistory`` additionally mirrors its messages to a JSON
file so the conversation outlives the process on its own.
"""

from __future__ import annotations

import json
from abc import abstractmethod
from logging import getLogger
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from langchain_core.messages import BaseMessage, messages_from_dict, messages_to_dict

from agentflow.exceptions import ChatHistoryError
from agentflow.workflow.serialization import SerializableValue, register_serializable

logger = getLogger(__name__)


class ChatHistory(SerializableValue):
    """Ordered list of chat messages with an optional size cap.

    ``max_messages`` keeps only the most recent messages when set.
    """

    def __init__(self, max_messages: Optional[int] = None) -> None:
        self.max_messages = max_messages
        self._messages: List[BaseMessage] = []

    def add_message(self, message: BaseMessage) -> "ChatHistory":
        if not isinstance(message, BaseMessage):
            raise ChatHistoryError(
                f"Expected a BaseMessage, got {type(message).__name__}"
            )
        self._messages.append(message)
        self._trim()
        self._on_change()
        return self

    def add_messages(self, messages: Iterable[BaseMessage]) -> "ChatHistory":
        for message in messages:
            self.add_message(message)
        return self

    def get_messages(self) -> List[BaseMessage]:
        return list(self._messages)

    def get_last_message(self) -> Optional[BaseMessage]:
        return self._messages[-1] if self._messages else None

    def clear(self) -> "ChatHistory":
        self._messages = []
        self._on_change()
        return self

    def __len__(self) -> int:
        return len(self._messages)

    def _trim(self) -> None:
        if self.max_messages and len(self._messages) > self.max_messages:
            self._messages = self._messages[-self.max_messages:]

    def _on_change(self) -> None:
        """Hook for subclasses that persist on every change."""

    # ── Serialization ──

    def _config(self) -> Dict[str, Any]:
        return {"max_messages": self.max_messages}

    def to_bytes(self) -> bytes:
        payload = {
            "config": self._config(),
            "messages": messages_to_dict(self._messages),
        }
        return json.dumps(payload).encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "ChatHistory":
        payload = json.loads(data.decode("utf-8"))
        history = cls._from_config(payload.get("config", {}))
        history._messages = messages_from_dict(payload.get("messages", []))
        return history

    @classmethod
    @abstractmethod
    def _from_config(cls, config: Dict[str, Any]) -> "ChatHistory":
        """Rebuild an empty history from ``_config`` output."""

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._config() == other._config() and self._messages == other._messages


@register_serializable
class InMemoryChatHistory(ChatHistory):
    @classmethod
    def _from_config(cls, config: Dict[str, Any]) -> "InMemoryChatHistory":
        return cls(max_messages=config.get("max_messages"))

    def __repr__(self) -> str:
        return f"InMemoryChatHistory(messages={len(self)})"


@register_serializable
class FileChatHistory(ChatHistory):
    """History persisted to ``<directory>/<prefix><key><ext>``.

    Existing messages are loaded when the file is already present.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        key: str,
        prefix: str = "agentflow_",
        ext: str = ".chat",
        max_messages: Optional[int] = None,
    ) -> None:
        super().__init__(max_messages=max_messages)
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise ChatHistoryError(f"Directory '{self.directory}' does not exist")
        self.key = key
        self.prefix = prefix
        self.ext = ext
        self._load()

    @property
    def file_path(self) -> Path:
        return self.directory / f"{self.prefix}{self.key}{self.ext}"

    def _load(self) -> None:
        path = self.file_path
        if not path.is_file():
            return
        try:
            self._messages = messages_from_dict(
                json.loads(path.read_text(encoding="utf-8"))
            )
        except (OSError, ValueError, KeyError) as e:
            raise ChatHistoryError(f"Failed to load chat history {path}: {e}") from e
        self._trim()

    def _on_change(self) -> None:
        path = self.file_path
        try:
            path.write_text(
                json.dumps(messages_to_dict(self._messages)),
                encoding="utf-8",
            )
        except OSError as e:
            raise ChatHistoryError(f"Failed to write chat history {path}: {e}") from e

    def remove(self) -> None:
        """Delete the backing file and forget all messages."""
        self._messages = []
        self.file_path.unlink(missing_ok=True)
        logger.debug(f"Chat history removed: {self.file_path}")

    def _config(self) -> Dict[str, Any]:
        return {
            "directory": str(self.directory),
            "key": self.key,
            "prefix": self.prefix,
            "ext": self.ext,
            "max_messages": self.max_messages,
        }

    @classmethod
    def _from_config(cls, config: Dict[str, Any]) -> "FileChatHistory":
        history = cls.__new__(cls)
        ChatHistory.__init__(history, max_messages=config.get("max_messages"))
        history.directory = Path(config["directory"])
        history.key = config["key"]
        history.prefix = config.get("prefix", "agentflow_")
        history.ext = config.get("ext", ".chat")
        return history

    def __repr__(self) -> str:
        return f"FileChatHistory(key={self.key!r}, messages={len(self)})"
