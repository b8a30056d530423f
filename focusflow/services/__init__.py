# focusflow/services/__init__.py

"""
Services of FocusFlow that sit beside the stores: connection health,
local persisted state, the chat assistant, analytics and calendar export.
"""

from .chat_assistant import ChatAssistant, ChatMessage, generate_ai_response
from .health_check import ConnectionMonitor
from .local_storage import LocalStorage

__all__ = [
    "ChatAssistant",
    "ChatMessage",
    "ConnectionMonitor",
    "LocalStorage",
    "generate_ai_response",
]
