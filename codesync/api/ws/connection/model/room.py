# room.py

from datetime import datetime
from typing import Optional


class RoomDocument:
    """Latest shared document state of a room (last write wins per field)."""

    def __init__(self, room_id: str):
        self.room_id = room_id
        self.code: Optional[str] = None
        self.language: Optional[str] = None
        self.created_at = datetime.now()
        self.last_activity = datetime.now()

    def set_code(self, code: str):
        """Replace the shared code text."""
        self.code = code
        self.last_activity = datetime.now()

    def set_language(self, language: str):
        """Replace the selected language tag."""
        self.language = language
        self.last_activity = datetime.now()

    def has_code(self) -> bool:
        return bool(self.code)

    def has_language(self) -> bool:
        return bool(self.language)

    def snapshot(self) -> tuple:
        """Return the (code, language) pair."""
        return self.code, self.language
