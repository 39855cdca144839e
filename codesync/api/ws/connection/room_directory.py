from typing import Dict, List, Optional

from .model.room import RoomDocument


class RoomDirectory:
    """
    Holds the latest shared document of every room that has been updated since it
    last became empty. Entries are created lazily by the first code or language write;
    no validation is applied to either field.
    """

    def __init__(self):
        self.rooms: Dict[str, RoomDocument] = {}

    def get_document(self, room_id: str) -> Optional[RoomDocument]:
        """
        Get the stored document of a room.

        Args:
            room_id: The ID of the room

        Returns:
            The RoomDocument, or None if the room has no stored state
        """
        return self.rooms.get(room_id)

    def _get_or_create(self, room_id: str) -> RoomDocument:
        if room_id not in self.rooms:
            self.rooms[room_id] = RoomDocument(room_id=room_id)
        return self.rooms[room_id]

    def set_code(self, room_id: str, code: str) -> RoomDocument:
        document = self._get_or_create(room_id)
        document.set_code(code)
        return document

    def set_language(self, room_id: str, language: str) -> RoomDocument:
        document = self._get_or_create(room_id)
        document.set_language(language)
        return document

    def delete_room(self, room_id: str) -> bool:
        """
        Drop the stored document of a room.

        Returns:
            True if an entry was removed
        """
        return self.rooms.pop(room_id, None) is not None

    def room_ids(self) -> List[str]:
        return list(self.rooms.keys())

    def __contains__(self, room_id: str) -> bool:
        return room_id in self.rooms
