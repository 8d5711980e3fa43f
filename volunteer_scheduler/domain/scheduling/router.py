"""Schedule router - FastAPI endpoints for schedule operations"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...schemas import PathId, api_response
from .schemas import (
    ScheduleCreate,
    ScheduleDetailResponse,
    ScheduleResponse,
    ScheduleUpdate,
    ScheduleWithEventResponse,
)
from .service import ScheduleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedules", tags=["Schedules"])
conflicts_router = APIRouter(prefix="/conflicts", tags=["Conflicts"])


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    """Dependency injection for ScheduleService"""
    return ScheduleService(db)


# ============================================================================
# READS
# ============================================================================


@router.get("")
def get_schedules(service: ScheduleService = Depends(get_schedule_service)):
    """Get all schedules"""
    schedules = service.get_schedules()
    return api_response(data=[ScheduleResponse.from_schedule(s) for s in schedules])


@router.get("/event/{event_id}")
def get_schedules_by_event(
    event_id: PathId,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Get the schedules of an event with volunteer, team and role detail"""
    schedules = service.get_schedules_by_event(event_id)
    return api_response(data=[ScheduleDetailResponse.from_schedule(s) for s in schedules])


@router.get("/volunteer/{volunteer_id}")
def get_schedules_by_volunteer(
    volunteer_id: PathId,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Get the schedules of a volunteer with event detail"""
    schedules = service.get_schedules_by_volunteer(volunteer_id)
    return api_response(data=[ScheduleWithEventResponse.from_schedule(s) for s in schedules])


@router.get("/{schedule_id}")
def get_schedule(
    schedule_id: PathId,
    service: ScheduleService = Depends(get_schedule_service),
):
    schedule = service.get_schedule(schedule_id)
    return api_response(data=ScheduleResponse.from_schedule(schedule))


# ============================================================================
# WRITES
# ============================================================================


@router.post("")
def create_schedule(
    data: ScheduleCreate,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Create a schedule; rejected when the volunteer already serves that day"""
    schedule = service.create_schedule(data)
    return api_response(
        data=ScheduleResponse.from_schedule(schedule),
        message="Schedule created successfully",
        status_code=201,
    )


@router.put("/{schedule_id}")
def update_schedule(
    schedule_id: PathId,
    data: ScheduleUpdate,
    service: ScheduleService = Depends(get_schedule_service),
):
    schedule = service.update_schedule(schedule_id, data)
    return api_response(
        data=ScheduleResponse.from_schedule(schedule),
        message="Schedule updated successfully",
    )


@router.delete("/{schedule_id}")
def delete_schedule(
    schedule_id: PathId,
    service: ScheduleService = Depends(get_schedule_service),
):
    service.delete_schedule(schedule_id)
    return api_response(message="Schedule deleted successfully")


# ============================================================================
# CONFLICT REPORT
# ============================================================================


@conflicts_router.get("")
def get_conflicts(service: ScheduleService = Depends(get_schedule_service)):
    """Volunteers holding more than one schedule on the same calendar day"""
    return api_response(data=service.get_conflicts())
