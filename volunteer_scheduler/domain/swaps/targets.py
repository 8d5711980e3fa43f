"""What a swap request asks for, derived from its two optional target columns"""

from dataclasses import dataclass
from typing import Union

from ...models import SwapRequest


@dataclass(frozen=True)
class TargetSchedule:
    """Exchange volunteers with another schedule"""

    schedule_id: int


@dataclass(frozen=True)
class TargetVolunteer:
    """Hand the requestor's schedule over to a named volunteer"""

    volunteer_id: int


@dataclass(frozen=True)
class NoTarget:
    """Drop out of the schedule with no replacement"""


SwapTarget = Union[TargetSchedule, TargetVolunteer, NoTarget]


def swap_target(swap_request: SwapRequest) -> SwapTarget:
    """A target schedule wins over a target volunteer when both are stored"""
    if swap_request.target_schedule_id is not None:
        return TargetSchedule(swap_request.target_schedule_id)
    if swap_request.target_volunteer_id is not None:
        return TargetVolunteer(swap_request.target_volunteer_id)
    return NoTarget()
