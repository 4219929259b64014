"""
Waitlist endpoints.
"""

import datetime

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.db.session import get_db
from app.models.waitlist import WaitlistStatus
from app.schemas.interval import TimeSlot
from app.schemas.waitlist import OfferResponse, WaitlistEntryCreate, WaitlistEntryResponse, WaitlistSort
from app.services.waitlist_service import WaitlistService

router = APIRouter()


@router.get("/entries/{entry_id}", summary="Get a waitlist entry.", response_model=WaitlistEntryResponse)
def get_entry(entry_id: int, db: Session = Depends(get_db)):
    return WaitlistService(db).get_entry(entry_id)


@router.post("/entries/{entry_id}/notify", summary="Offer a slot to a waitlisted client.",
             response_model=WaitlistEntryResponse, )
def notify(entry_id: int, slot: TimeSlot, db: Session = Depends(get_db)):
    return WaitlistService(db).notify_candidate(entry_id, slot)


@router.post("/entries/{entry_id}/respond", summary="Accept or decline an offer.",
             response_model=WaitlistEntryResponse, )
def respond(entry_id: int, data: OfferResponse, db: Session = Depends(get_db)):
    return WaitlistService(db).respond_to_offer(entry_id, data.accept)


@router.post("/entries/{entry_id}/cancel", summary="Cancel a waitlist entry (irreversible).",
             response_model=WaitlistEntryResponse, )
def cancel(entry_id: int, db: Session = Depends(get_db)):
    return WaitlistService(db).cancel_waitlist_entry(entry_id)


@router.post("/{coach_id}", summary="Add a client to the waitlist.", response_model=WaitlistEntryResponse,
             status_code=status.HTTP_201_CREATED, )
def add(coach_id: int, data: WaitlistEntryCreate, db: Session = Depends(get_db)):
    return WaitlistService(db).add_to_waitlist(coach_id, data)


@router.get("/{coach_id}", summary="Coach waitlist, ordered.", response_model=list[WaitlistEntryResponse])
def get_waitlist(coach_id: int, status_filter: WaitlistStatus = Query(WaitlistStatus.active, alias="status"),
                 sort_by: WaitlistSort = Query("priority"), db: Session = Depends(get_db), ):
    return WaitlistService(db).get_coach_waitlist(coach_id, status_filter, sort_by)


@router.get("/{coach_id}/candidates", summary="Active entries matching a freed slot.",
            response_model=list[WaitlistEntryResponse], )
def get_candidates(coach_id: int, date: datetime.date, start_time: datetime.time, end_time: datetime.time,
                   db: Session = Depends(get_db), ):
    slot = TimeSlot(date=date, start_time=start_time, end_time=end_time)
    return WaitlistService(db).find_candidates_for_slot(coach_id, slot)
