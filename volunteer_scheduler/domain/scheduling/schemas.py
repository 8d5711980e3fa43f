"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, StrictInt, field_validator

from ...shared.validators import validate_positive_id, validate_schedule_status


class ScheduleCreate(BaseModel):
    """Schema for creating a schedule"""

    eventId: StrictInt
    volunteerId: StrictInt
    status: Optional[str] = None
    traineePartnerId: Optional[StrictInt] = None
    createdById: StrictInt

    @field_validator("eventId", "volunteerId", "createdById", "traineePartnerId")
    @classmethod
    def validate_ids(cls, v):
        return validate_positive_id(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return validate_schedule_status(v)


class ScheduleUpdate(ScheduleCreate):
    """Schema for replacing a schedule; same fields as creation"""


class ScheduleResponse(BaseModel):
    """Schema for schedule response"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    eventId: int
    volunteerId: int
    status: str
    traineePartnerId: Optional[int] = None
    createdById: int
    createdAt: Optional[datetime] = None

    @classmethod
    def from_schedule(cls, s) -> "ScheduleResponse":
        return cls(
            id=s.id,
            eventId=s.event_id,
            volunteerId=s.volunteer_id,
            status=s.status,
            traineePartnerId=s.trainee_partner_id,
            createdById=s.created_by_id,
            createdAt=s.created_at,
        )


class ScheduleDetailResponse(ScheduleResponse):
    """Schedule of an event, with who fills it"""

    userId: int
    userName: str
    teamId: int
    teamName: str
    roleName: str
    isTrainee: bool

    @classmethod
    def from_schedule(cls, s) -> "ScheduleDetailResponse":
        v = s.volunteer
        return cls(
            **ScheduleResponse.from_schedule(s).model_dump(),
            userId=v.user_id,
            userName=v.user.name,
            teamId=v.team_id,
            teamName=v.team.name,
            roleName=v.role.name,
            isTrainee=v.is_trainee,
        )


class ScheduleWithEventResponse(ScheduleResponse):
    """Schedule of a volunteer, with the event it belongs to"""

    eventTitle: str
    eventDate: datetime
    location: str
    eventType: str

    @classmethod
    def from_schedule(cls, s) -> "ScheduleWithEventResponse":
        e = s.event
        return cls(
            **ScheduleResponse.from_schedule(s).model_dump(),
            eventTitle=e.title,
            eventDate=e.event_date,
            location=e.location,
            eventType=e.event_type,
        )
