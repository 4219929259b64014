"""
Booking lifecycle endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.db.session import get_db
from app.schemas.booking import BookingCancel, BookingCreate, BookingResponse
from app.services.booking_service import BookingService

router = APIRouter()


@router.post("", summary="Record a booking inside a free availability slot.", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def create_booking(data: BookingCreate, db: Session = Depends(get_db)):
    return BookingService(db).create_booking(data)


@router.get("/{booking_id}", summary="Get a booking.", response_model=BookingResponse)
def get_booking(booking_id: int, db: Session = Depends(get_db)):
    return BookingService(db).get_booking(booking_id)


@router.post("/{booking_id}/complete", summary="Complete a session (draws from its package).",
             response_model=BookingResponse, )
def complete(booking_id: int, db: Session = Depends(get_db)):
    return BookingService(db).complete_booking(booking_id)


@router.post("/{booking_id}/cancel", summary="Cancel a session and offer the slot to the waitlist.",
             response_model=BookingResponse, )
def cancel(booking_id: int, data: BookingCancel, db: Session = Depends(get_db)):
    return BookingService(db).cancel_booking(booking_id, data.reason, data.offer_to_waitlist)


@router.post("/{booking_id}/no-show", summary="Mark a session as missed.", response_model=BookingResponse)
def no_show(booking_id: int, db: Session = Depends(get_db)):
    return BookingService(db).mark_no_show(booking_id)
