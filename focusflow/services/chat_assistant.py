# focusflow/services/chat_assistant.py

import asyncio
import logging
import random
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from focusflow.services.local_storage import (
    CHAT_CLEARED_ON_LOGIN_KEY,
    CHAT_KEYS,
    CHAT_MESSAGES_KEY,
    CHAT_SHOW_KEY,
    LocalStorage,
)
from focusflow.utils.datetime_utils import utcnow

logger = logging.getLogger(__name__)

SUGGESTED_PROMPTS = [
    ("Help me create a new habit",
     "I want to create a new habit. Can you help me set realistic goals and frequency?"),
    ("Analyze my progress",
     "Can you help me analyze my habit tracking progress and suggest improvements?"),
    ("Plan my week",
     "Help me plan an effective weekly schedule for my habits and goals."),
    ("Motivation tips",
     "I'm struggling to stay motivated with my habits. Can you give me some tips?"),
]

HABIT_REPLY = (
    "Great question about habits! Building sustainable habits is all about starting small and being consistent. "
    "I recommend:\n\n"
    "• Start with just 2-3 habits at most\n"
    "• Make them specific and measurable\n"
    "• Choose a consistent time of day\n"
    "• Track your progress daily\n\n"
    "What specific habit are you looking to build?"
)

MOTIVATION_REPLY = (
    "I understand that staying motivated can be challenging! Here are some strategies that work well:\n\n"
    "• Focus on your 'why' - remember your deeper reasons\n"
    "• Celebrate small wins along the way\n"
    "• Find an accountability partner\n"
    "• Track your streak to see visual progress\n"
    "• Be kind to yourself when you miss a day\n\n"
    "Remember, progress isn't always linear. What's been your biggest challenge so far?"
)

PROGRESS_REPLY = (
    "Analyzing your progress is key to improvement! Here's what I recommend looking at:\n\n"
    "• Completion rate over the last 30 days\n"
    "• Which days of the week you're most/least successful\n"
    "• Patterns around missed days\n"
    "• Energy levels and mood correlation\n\n"
    "You can check your analytics in the Dashboard to see these insights. "
    "Would you like tips on improving any specific areas?"
)

PLAN_REPLY = (
    "Smart planning makes all the difference! Here's how to plan effectively:\n\n"
    "• Review your current habits and their frequency\n"
    "• Identify your peak energy times\n"
    "• Block time for each habit in your calendar\n"
    "• Plan for obstacles and have backup plans\n"
    "• Leave buffer time between activities\n\n"
    "Would you like help planning a specific part of your routine?"
)

GREETING_REPLY = (
    "Hello! I'm excited to help you on your habit-building journey. Whether you need help creating new habits, "
    "staying motivated, or analyzing your progress, I'm here for you. What would you like to work on today?"
)

DEFAULT_REPLY = (
    "That's a great question! I'm here to help you with habit tracking, goal setting, motivation, "
    "and progress analysis. Feel free to ask me about:\n\n"
    "• Creating effective habits\n"
    "• Staying motivated\n"
    "• Analyzing your progress\n"
    "• Planning your routine\n"
    "• Overcoming obstacles\n\n"
    "What specific area would you like to explore?"
)

# First matching keyword group wins; matching is by substring
KEYWORD_REPLIES = [
    (("habit", "goal"), HABIT_REPLY),
    (("motivation", "struggle"), MOTIVATION_REPLY),
    (("progress", "analyze"), PROGRESS_REPLY),
    (("plan", "schedule"), PLAN_REPLY),
    (("hello", "hi"), GREETING_REPLY),
]


def generate_ai_response(user_message: str) -> str:
    lower = user_message.lower()
    for keywords, reply in KEYWORD_REPLIES:
        if any(keyword in lower for keyword in keywords):
            return reply
    return DEFAULT_REPLY


@dataclass
class ChatMessage:
    content: str
    is_user: bool
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "is_user": self.is_user,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        return cls(
            id=data["id"],
            content=data["content"],
            is_user=data["is_user"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


class ChatAssistant:
    """Keyword-based habit coach; transcript and visibility live in local storage"""

    def __init__(self, storage: LocalStorage, delay_min: float = 1.0, delay_max: float = 2.0):
        self.storage = storage
        self.delay_min = delay_min
        self.delay_max = delay_max
        self.is_typing = False

    @property
    def messages(self) -> List[ChatMessage]:
        return [ChatMessage.from_dict(item) for item in self.storage.get_item(CHAT_MESSAGES_KEY, [])]

    @property
    def show_chat(self) -> bool:
        return bool(self.storage.get_item(CHAT_SHOW_KEY, False))

    @property
    def has_cleared_on_login(self) -> bool:
        return bool(self.storage.get_item(CHAT_CLEARED_ON_LOGIN_KEY, False))

    def _append(self, message: ChatMessage) -> None:
        transcript = self.storage.get_item(CHAT_MESSAGES_KEY, [])
        transcript.append(message.to_dict())
        self.storage.set_item(CHAT_MESSAGES_KEY, transcript)

    def _reset(self) -> None:
        self.storage.set_item(CHAT_MESSAGES_KEY, [])
        self.storage.set_item(CHAT_SHOW_KEY, False)
        self.is_typing = False

    async def send_message(self, text: str) -> Optional[ChatMessage]:
        """Record the user's message and, after a short typing delay, the reply"""
        text = (text or "").strip()
        if not text:
            return None

        self._append(ChatMessage(content=text, is_user=True))
        self.storage.set_item(CHAT_SHOW_KEY, True)
        self.is_typing = True

        try:
            await asyncio.sleep(random.uniform(self.delay_min, self.delay_max))
            reply = ChatMessage(content=generate_ai_response(text), is_user=False)
            self._append(reply)
        finally:
            self.is_typing = False
        return reply

    def on_login(self) -> None:
        """Start each login with an empty chat, but only once per login"""
        if not self.has_cleared_on_login:
            self._reset()
            self.storage.set_item(CHAT_CLEARED_ON_LOGIN_KEY, True)
            logger.debug("Chat cleared for new login")

    def on_logout(self) -> None:
        self.storage.remove_item(*CHAT_KEYS)
        self.is_typing = False
