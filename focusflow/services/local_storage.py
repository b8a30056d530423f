# focusflow/services/local_storage.py

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CHAT_MESSAGES_KEY = "aiChatMessages"
CHAT_SHOW_KEY = "aiChatShowChat"
CHAT_CLEARED_ON_LOGIN_KEY = "aiChatHasClearedOnLogin"

CHAT_KEYS = (CHAT_MESSAGES_KEY, CHAT_SHOW_KEY, CHAT_CLEARED_ON_LOGIN_KEY)


class LocalStorage:
    """Small key-value state kept in one JSON file on the user's machine"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _save(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def get_item(self, key: str, default: Optional[Any] = None) -> Any:
        return self._load().get(key, default)

    def set_item(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, *keys: str) -> None:
        data = self._load()
        if any(key in data for key in keys):
            for key in keys:
                data.pop(key, None)
            self._save(data)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.debug(f"Local storage cleared: {self.path}")
