"""
Pet endpoints, including portion recalculation and preview.
"""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from pawfeed.api.dependencies import get_feeder_id
from pawfeed.db.session import get_db
from pawfeed.schemas.feeding_schedule import (
    FeedingScheduleCreate,
    FeedingScheduleResponse,
    PortionPreviewRequest,
)
from pawfeed.schemas.pet import PetCreate, PetResponse, PetUpdate
from pawfeed.schemas.portion import PendingEdit, RecalcResult
from pawfeed.services.feeding_schedule_service import FeedingScheduleService
from pawfeed.services.pet_service import PetService

router = APIRouter()


@router.get("", summary="List the feeder's pets.", response_model=list[PetResponse], )
def list_pets(db: Session = Depends(get_db), feeder_id: str = Depends(get_feeder_id), ):
    return PetService(db).get_all(feeder_id)


@router.post("", summary="Add a pet.", response_model=PetResponse, status_code=status.HTTP_201_CREATED, )
def create_pet(data: PetCreate, db: Session = Depends(get_db), feeder_id: str = Depends(get_feeder_id), ):
    return PetService(db).create(feeder_id, data)


@router.get("/{pet_id}", summary="Get a pet.", response_model=PetResponse, )
def get_pet(pet_id: int, db: Session = Depends(get_db), feeder_id: str = Depends(get_feeder_id), ):
    return PetService(db).get_by_id(feeder_id, pet_id)


@router.patch("/{pet_id}", summary="Update a pet (recalculates portions if the allowance changes).",
              response_model=PetResponse, )
def update_pet(pet_id: int, data: PetUpdate, db: Session = Depends(get_db),
               feeder_id: str = Depends(get_feeder_id), ):
    return PetService(db).update(feeder_id, pet_id, data)


@router.delete("/{pet_id}", summary="Delete a pet and its schedules.", status_code=status.HTTP_204_NO_CONTENT, )
def delete_pet(pet_id: int, db: Session = Depends(get_db), feeder_id: str = Depends(get_feeder_id), ):
    PetService(db).delete(feeder_id, pet_id)


# ----------------------------------------------------------------------
# Schedules and portions of a pet
# ----------------------------------------------------------------------


@router.get("/{pet_id}/schedules", summary="List a pet's feeding schedules.",
            response_model=list[FeedingScheduleResponse], )
def list_schedules(pet_id: int, db: Session = Depends(get_db), feeder_id: str = Depends(get_feeder_id), ):
    return FeedingScheduleService(db).get_by_pet(feeder_id, pet_id)


@router.post("/{pet_id}/schedules", summary="Add a feeding schedule; returns the pet's recalculated schedules.",
             response_model=list[FeedingScheduleResponse], status_code=status.HTTP_201_CREATED, )
def create_schedule(pet_id: int, data: FeedingScheduleCreate, db: Session = Depends(get_db),
                    feeder_id: str = Depends(get_feeder_id), ):
    return FeedingScheduleService(db).create(feeder_id, pet_id, data)


@router.post("/{pet_id}/portions/recalculate", summary="Recalculate and store the pet's portions.",
             response_model=RecalcResult, )
def recalculate_portions(pet_id: int, db: Session = Depends(get_db), feeder_id: str = Depends(get_feeder_id), ):
    return FeedingScheduleService(db).recalculate_pet(feeder_id, pet_id)


@router.post("/{pet_id}/portions/preview", summary="Show the portion changes an edit would cause, without saving.",
             response_model=RecalcResult, )
def preview_portions(pet_id: int, data: PortionPreviewRequest, db: Session = Depends(get_db),
                     feeder_id: str = Depends(get_feeder_id), ):
    pending = None
    if data.schedule_id is not None:
        pending = PendingEdit(schedule_id=data.schedule_id, changes=data.changes)
    return FeedingScheduleService(db).preview(feeder_id, pet_id, pending)
