"""
Chat history handles that can be stored in a workflow state.
"""

from agentflow.chat.chat_history import ChatHistory, FileChatHistory, InMemoryChatHistory

__all__ = ["ChatHistory", "FileChatHistory", "InMemoryChatHistory"]
