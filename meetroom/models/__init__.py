"""Models package: import all models so metadata.create_all can discover them."""

from meetroom.models.role import Role
from meetroom.models.user import User
from meetroom.models.meeting_room import MeetingRoom, Meet

__all__ = ["Role", "User", "MeetingRoom", "Meet"]
