"""Swap request domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, StrictInt, field_validator

from ...shared.validators import validate_positive_id, validate_reason


class SwapRequestCreate(BaseModel):
    """Schema for creating a swap request"""

    requestorScheduleId: StrictInt
    targetScheduleId: Optional[StrictInt] = None
    targetVolunteerId: Optional[StrictInt] = None
    reason: Optional[str] = None

    @field_validator("requestorScheduleId", "targetScheduleId", "targetVolunteerId")
    @classmethod
    def validate_ids(cls, v):
        return validate_positive_id(v)

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, v):
        return validate_reason(v)


class SwapRequestResponse(BaseModel):
    """Schema for swap request response"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    requestorScheduleId: int
    targetScheduleId: Optional[int] = None
    targetVolunteerId: Optional[int] = None
    reason: str
    status: str
    createdAt: Optional[datetime] = None

    @classmethod
    def from_swap_request(cls, sr) -> "SwapRequestResponse":
        return cls(
            id=sr.id,
            requestorScheduleId=sr.requestor_schedule_id,
            targetScheduleId=sr.target_schedule_id,
            targetVolunteerId=sr.target_volunteer_id,
            reason=sr.reason or "",
            status=sr.status,
            createdAt=sr.created_at,
        )


class SwapRequestDetailResponse(SwapRequestResponse):
    """Swap request with the events and people on both sides"""

    requestorEventTitle: Optional[str] = None
    requestorEventDate: Optional[datetime] = None
    requestorName: Optional[str] = None
    targetEventTitle: Optional[str] = None
    targetEventDate: Optional[datetime] = None
    targetName: Optional[str] = None

    @classmethod
    def from_swap_request(cls, sr) -> "SwapRequestDetailResponse":
        requestor = sr.requestor_schedule
        target = sr.target_schedule

        # The person on the other side: target schedule's volunteer, else the named volunteer
        if target is not None:
            target_name = target.volunteer.user.name
        elif sr.target_volunteer is not None:
            target_name = sr.target_volunteer.user.name
        else:
            target_name = None

        return cls(
            **SwapRequestResponse.from_swap_request(sr).model_dump(),
            requestorEventTitle=requestor.event.title,
            requestorEventDate=requestor.event.event_date,
            requestorName=requestor.volunteer.user.name,
            targetEventTitle=target.event.title if target is not None else None,
            targetEventDate=target.event.event_date if target is not None else None,
            targetName=target_name,
        )
