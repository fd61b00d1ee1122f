"""Meeting room API router."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from meetroom.db.session import get_db
from meetroom.schemas.schemas import (
    MeetingRoomCreate, MeetingRoomUpdate, MeetingRoomOut, SuccessResponse,
)
from meetroom.services.meeting_room_service import meeting_room_service

router = APIRouter(prefix="/meeting-room", tags=["meeting-room"])


@router.get("", response_model=list[MeetingRoomOut])
async def list_rooms(db: Session = Depends(get_db)):
    """List meeting rooms by name."""
    return [MeetingRoomOut.model_validate(r) for r in meeting_room_service.get_all(db)]


@router.post("", response_model=SuccessResponse)
async def create_room(body: MeetingRoomCreate, db: Session = Depends(get_db)):
    meeting_room_service.create(db, **body.model_dump())
    return SuccessResponse()


@router.get("/{room_id}", response_model=MeetingRoomOut)
async def get_room(room_id: int, db: Session = Depends(get_db)):
    return MeetingRoomOut.model_validate(meeting_room_service.get_by_id(db, room_id))


@router.put("/{room_id}", response_model=SuccessResponse)
async def update_room(room_id: int, body: MeetingRoomUpdate, db: Session = Depends(get_db)):
    meeting_room_service.update(db, room_id, **body.model_dump(exclude_unset=True))
    return SuccessResponse()


@router.delete("/{room_id}", response_model=SuccessResponse)
async def delete_room(room_id: int, db: Session = Depends(get_db)):
    meeting_room_service.delete(db, room_id)
    return SuccessResponse()
