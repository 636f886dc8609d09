"""
Feeding schedule endpoints.

Every change returns the pet's full schedule list, since a single edit
can move portions on (and split) the pet's other schedules.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from pawfeed.api.dependencies import get_feeder_id
from pawfeed.db.session import get_db
from pawfeed.schemas.feeding_schedule import FeedingScheduleResponse, FeedingScheduleUpdate
from pawfeed.services.feeding_schedule_service import FeedingScheduleService

router = APIRouter()


@router.get("/{schedule_id}", summary="Get a feeding schedule.", response_model=FeedingScheduleResponse, )
def get_schedule(schedule_id: int, db: Session = Depends(get_db), feeder_id: str = Depends(get_feeder_id), ):
    return FeedingScheduleService(db).get_by_id(feeder_id, schedule_id)


@router.patch("/{schedule_id}", summary="Edit a feeding schedule.", response_model=list[FeedingScheduleResponse], )
def update_schedule(schedule_id: int, data: FeedingScheduleUpdate, db: Session = Depends(get_db),
                    feeder_id: str = Depends(get_feeder_id), ):
    return FeedingScheduleService(db).update(feeder_id, schedule_id, data)


@router.put("/{schedule_id}/days/{day}", summary="Edit only one day of a recurring schedule.",
            response_model=list[FeedingScheduleResponse], )
def edit_single_day(schedule_id: int, day: str, data: FeedingScheduleUpdate, db: Session = Depends(get_db),
                    feeder_id: str = Depends(get_feeder_id), ):
    return FeedingScheduleService(db).edit_single_day(feeder_id, schedule_id, day, data)


@router.post("/{schedule_id}/skip/{day}", summary="Skip (or un-skip) one day of a schedule.",
             response_model=list[FeedingScheduleResponse], )
def toggle_skip(schedule_id: int, day: str, db: Session = Depends(get_db),
                feeder_id: str = Depends(get_feeder_id), ):
    return FeedingScheduleService(db).toggle_skip(feeder_id, schedule_id, day)


@router.post("/{schedule_id}/enable", summary="Enable a schedule.", response_model=list[FeedingScheduleResponse], )
def enable_schedule(schedule_id: int, db: Session = Depends(get_db), feeder_id: str = Depends(get_feeder_id), ):
    return FeedingScheduleService(db).set_enabled(feeder_id, schedule_id, True)


@router.post("/{schedule_id}/disable", summary="Disable a schedule.", response_model=list[FeedingScheduleResponse], )
def disable_schedule(schedule_id: int, db: Session = Depends(get_db), feeder_id: str = Depends(get_feeder_id), ):
    return FeedingScheduleService(db).set_enabled(feeder_id, schedule_id, False)


@router.delete("/{schedule_id}", summary="Delete a schedule, or only one of its days.",
               status_code=status.HTTP_204_NO_CONTENT, )
def delete_schedule(schedule_id: int,
                    day: Optional[str] = Query(None, description="Remove only this day (e.g. 'Wed')"),
                    db: Session = Depends(get_db), feeder_id: str = Depends(get_feeder_id), ):
    FeedingScheduleService(db).delete(feeder_id, schedule_id, day)
