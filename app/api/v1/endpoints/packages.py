"""
Shared package and expiration endpoints.
"""

import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.db.session import get_db
from app.schemas.expiration import ExpiringPackage, ExpiringPackagesGrouped
from app.schemas.package import (PackageMemberRequest, PackageResponse, SharedPackageCreate,
                                 SharedPackageUsageResponse, TrackUsageRequest, )
from app.services.expiration_service import PackageExpirationService
from app.services.shared_package_service import SharedPackageService

router = APIRouter()


@router.post("/coach/{coach_id}/shared", summary="Create a (possibly shared) package.",
             response_model=PackageResponse, status_code=status.HTTP_201_CREATED, )
def create_shared_package(coach_id: int, data: SharedPackageCreate, db: Session = Depends(get_db)):
    return SharedPackageService(db).create_shared_package(coach_id, data)


@router.get("/coach/{coach_id}/clients/{client_id}/available", summary="Packages a client can draw from.",
            response_model=list[PackageResponse], )
def get_available(coach_id: int, client_id: int, db: Session = Depends(get_db)):
    return SharedPackageService(db).get_client_available_packages(coach_id, client_id)


@router.get("/coach/{coach_id}/expiring", summary="Packages expiring soon.", response_model=list[ExpiringPackage])
def get_expiring(coach_id: int, within_days: int = Query(7, ge=0, le=90),
                 today: Optional[datetime.date] = Query(None), db: Session = Depends(get_db), ):
    return PackageExpirationService(db).get_expiring_packages(coach_id, within_days, today)


@router.get("/coach/{coach_id}/expiring/grouped", summary="Expiring packages by urgency.",
            response_model=ExpiringPackagesGrouped, )
def get_expiring_grouped(coach_id: int, today: Optional[datetime.date] = Query(None), db: Session = Depends(get_db)):
    return PackageExpirationService(db).get_expiring_packages_grouped(coach_id, today)


@router.post("/usage", summary="Record one session drawn by a member.", response_model=SharedPackageUsageResponse)
def track_usage(data: TrackUsageRequest, db: Session = Depends(get_db)):
    return SharedPackageService(db).track_session_usage(data.booking_id, data.used_by_client_id)


@router.get("/{package_id}", summary="Get a package.", response_model=PackageResponse)
def get_package(package_id: int, db: Session = Depends(get_db)):
    return SharedPackageService(db).get_package(package_id)


@router.get("/{package_id}/usage", summary="Per-client usage breakdown.", response_model=SharedPackageUsageResponse)
def get_usage(package_id: int, db: Session = Depends(get_db)):
    return SharedPackageService(db).get_shared_package_usage(package_id)


@router.get("/{package_id}/can-use/{client_id}", summary="Can this client draw from the package?")
def can_use(package_id: int, client_id: int, db: Session = Depends(get_db)):
    return {"can_use": SharedPackageService(db).can_client_use_package(package_id, client_id)}


@router.post("/{package_id}/members", summary="Share the package with a client.", response_model=PackageResponse)
def add_member(package_id: int, data: PackageMemberRequest, db: Session = Depends(get_db)):
    return SharedPackageService(db).add_client_to_package(package_id, data.client_id)


@router.delete("/{package_id}/members/{client_id}", summary="Stop a client drawing from the package.",
               response_model=PackageResponse, )
def remove_member(package_id: int, client_id: int, db: Session = Depends(get_db)):
    return SharedPackageService(db).remove_client_from_package(package_id, client_id)
