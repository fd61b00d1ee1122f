"""Meeting room and meeting models."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from meetroom.db.base import Base


class MeetingRoom(Base):
    """Bookable room."""
    __tablename__ = "meeting_rooms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    location = Column(String(255), nullable=False)
    capacity = Column(Integer, nullable=False)

    meets = relationship(
        "Meet",
        back_populates="room",
        cascade="all, delete-orphan",
        lazy="select",
    )


class Meet(Base):
    """A meeting held in a room."""
    __tablename__ = "meets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime, nullable=False)
    room_id = Column(Integer, ForeignKey("meeting_rooms.id", ondelete="CASCADE"), nullable=False, index=True)

    room = relationship("MeetingRoom", back_populates="meets")
