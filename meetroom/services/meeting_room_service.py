"""Meeting room service."""

from typing import List

from sqlalchemy.orm import Session

from meetroom.models.meeting_room import MeetingRoom
from meetroom.core.exceptions import ResourceNotFoundError


class MeetingRoomService:
    """Plain CRUD over meeting rooms."""

    @staticmethod
    def get_all(db: Session) -> List[MeetingRoom]:
        return db.query(MeetingRoom).order_by(MeetingRoom.name.asc()).all()

    @staticmethod
    def get_by_id(db: Session, room_id: int) -> MeetingRoom:
        room = db.query(MeetingRoom).filter(MeetingRoom.id == room_id).first()
        if not room:
            raise ResourceNotFoundError(f"Meeting room {room_id} not found")
        return room

    @staticmethod
    def create(db: Session, name: str, location: str, capacity: int) -> MeetingRoom:
        room = MeetingRoom(name=name, location=location, capacity=capacity)
        db.add(room)
        db.commit()
        db.refresh(room)
        return room

    @staticmethod
    def update(db: Session, room_id: int, **kwargs) -> MeetingRoom:
        room = MeetingRoomService.get_by_id(db, room_id)
        for key in ("name", "location", "capacity"):
            if kwargs.get(key) is not None:
                setattr(room, key, kwargs[key])
        db.commit()
        db.refresh(room)
        return room

    @staticmethod
    def delete(db: Session, room_id: int) -> None:
        """Delete a room together with its meetings."""
        room = MeetingRoomService.get_by_id(db, room_id)
        db.delete(room)
        db.commit()


meeting_room_service = MeetingRoomService()
