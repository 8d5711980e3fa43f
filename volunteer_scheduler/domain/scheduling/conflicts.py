"""
Scheduling conflict detection

A volunteer conflicts with an event when they already hold a schedule for a
different event on the same calendar day. Only the date part of the event
timestamp is compared; two events on one day at non-overlapping times still
count as a clash.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...shared.errors import NotFoundError, StoreError
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)


def day_window(moment: datetime) -> tuple[datetime, datetime]:
    """Return [midnight, next midnight) of the calendar day containing moment"""
    start = datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)
    return start, start + timedelta(days=1)


class ConflictDetector:
    """Decides whether assigning a volunteer to an event clashes with their other schedules"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ScheduleRepository()

    def has_conflict(self, event_id: int, volunteer_id: int) -> bool:
        """
        Check for another schedule of the volunteer on the event's calendar day.

        Raises:
            NotFoundError: If the event does not exist
            StoreError: If the lookup fails
        """
        try:
            event = self.repo.get_event_by_id(self.db, event_id)
            if not event:
                raise NotFoundError("Event not found")

            start, end = day_window(event.event_date)
            clashing = self.repo.get_volunteer_schedules_between(
                self.db, volunteer_id, start, end, exclude_event_id=event_id
            )
        except SQLAlchemyError as e:
            logger.error(f"❌ Conflict lookup failed for event {event_id}, volunteer {volunteer_id}: {e}")
            raise StoreError("Error checking scheduling conflicts") from e

        if clashing:
            logger.info(
                f"⚠️ Volunteer {volunteer_id} already scheduled on {start.date()} "
                f"(schedules {[s.id for s in clashing]})"
            )
        return bool(clashing)

    def find_conflicts(self) -> list[dict]:
        """Every volunteer/day pair holding more than one schedule, with the clashing events"""
        by_volunteer_day: dict[tuple[int, date], list] = defaultdict(list)
        for schedule in self.repo.get_schedules_with_event_and_volunteer(self.db):
            key = (schedule.volunteer_id, schedule.event.event_date.date())
            by_volunteer_day[key].append(schedule)

        conflicts = []
        for (volunteer_id, event_day), schedules in by_volunteer_day.items():
            if len(schedules) < 2:
                continue
            volunteer = schedules[0].volunteer
            conflicts.append(
                {
                    "volunteerId": volunteer_id,
                    "volunteerName": volunteer.user.name if volunteer and volunteer.user else "",
                    "eventDay": event_day.isoformat(),
                    "eventCount": len(schedules),
                    "events": [
                        {
                            "id": s.event.id,
                            "title": s.event.title,
                            "location": s.event.location,
                            "eventDate": s.event.event_date,
                            "scheduleId": s.id,
                        }
                        for s in schedules
                    ],
                }
            )

        conflicts.sort(key=lambda c: (c["eventDay"], c["volunteerName"]))
        return conflicts
