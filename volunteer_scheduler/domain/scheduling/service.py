"""Schedule service - Business logic for schedule operations"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...database import atomic
from ...models import Schedule
from ...shared.errors import ConflictError, NotFoundError
from .conflicts import ConflictDetector
from .repository import ScheduleRepository
from .schemas import ScheduleCreate, ScheduleUpdate

logger = logging.getLogger(__name__)

DEFAULT_SCHEDULE_STATUS = "confirmed"


class ScheduleService:
    """Service layer for schedule business logic"""

    def __init__(self, db: Session, conflict_detector: Optional[ConflictDetector] = None):
        self.db = db
        self.repo = ScheduleRepository()
        self.conflicts = conflict_detector or ConflictDetector(db)

    def get_schedules(self) -> list[Schedule]:
        return self.repo.get_schedules(self.db)

    def get_schedule(self, schedule_id: int) -> Schedule:
        """Get a specific schedule"""
        schedule = self.repo.get_schedule_by_id(self.db, schedule_id)
        if not schedule:
            raise NotFoundError("Schedule not found")
        return schedule

    def get_schedules_by_event(self, event_id: int) -> list[Schedule]:
        if not self.repo.event_exists(self.db, event_id):
            raise NotFoundError("Event not found")
        return self.repo.get_schedules_by_event(self.db, event_id)

    def get_schedules_by_volunteer(self, volunteer_id: int) -> list[Schedule]:
        if not self.repo.volunteer_exists(self.db, volunteer_id):
            raise NotFoundError("Volunteer not found")
        return self.repo.get_schedules_by_volunteer(self.db, volunteer_id)

    def get_conflicts(self) -> list[dict]:
        return self.conflicts.find_conflicts()

    def _validate_referents(self, data: ScheduleCreate) -> None:
        if not self.repo.event_exists(self.db, data.eventId):
            raise NotFoundError("Event not found")
        if not self.repo.volunteer_exists(self.db, data.volunteerId):
            raise NotFoundError("Volunteer not found")
        if data.traineePartnerId is not None and not self.repo.volunteer_exists(
            self.db, data.traineePartnerId
        ):
            raise NotFoundError("Trainee partner not found")
        if not self.repo.user_exists(self.db, data.createdById):
            raise NotFoundError("Creator user not found")

    def create_schedule(self, data: ScheduleCreate) -> Schedule:
        """Create a schedule after the referential, duplicate and same-day checks"""
        logger.info(f"📥 Creating schedule: event {data.eventId}, volunteer {data.volunteerId}")

        with atomic(self.db):
            self._validate_referents(data)

            if self.repo.is_already_scheduled(self.db, data.eventId, data.volunteerId):
                raise ConflictError("This volunteer is already scheduled for this event")

            if self.conflicts.has_conflict(data.eventId, data.volunteerId):
                raise ConflictError(
                    "Scheduling conflict: the volunteer is already scheduled "
                    "for another event on the same day"
                )

            try:
                schedule = self.repo.create_schedule(
                    self.db,
                    event_id=data.eventId,
                    volunteer_id=data.volunteerId,
                    status=data.status or DEFAULT_SCHEDULE_STATUS,
                    trainee_partner_id=data.traineePartnerId,
                    created_by_id=data.createdById,
                )
            except IntegrityError as e:
                # A concurrent insert took the pair between the check and the flush
                logger.warning(f"⚠️ Duplicate schedule rejected by the database: {e.orig}")
                raise ConflictError("This volunteer is already scheduled for this event") from e

        logger.info(f"✅ Schedule {schedule.id} created")
        return schedule

    def update_schedule(self, schedule_id: int, data: ScheduleUpdate) -> Schedule:
        """Replace a schedule's fields; no same-day conflict check runs on update"""
        with atomic(self.db):
            schedule = self.get_schedule(schedule_id)
            self._validate_referents(data)

            if self.repo.is_already_scheduled(
                self.db, data.eventId, data.volunteerId, exclude_ids=[schedule_id]
            ):
                raise ConflictError("This volunteer is already scheduled for this event")

            try:
                self.repo.update_schedule(
                    self.db,
                    schedule,
                    event_id=data.eventId,
                    volunteer_id=data.volunteerId,
                    status=data.status or DEFAULT_SCHEDULE_STATUS,
                    trainee_partner_id=data.traineePartnerId,
                    created_by_id=data.createdById,
                )
            except IntegrityError as e:
                raise ConflictError("This volunteer is already scheduled for this event") from e

        logger.info(f"✏️ Schedule {schedule_id} updated")
        return schedule

    def delete_schedule(self, schedule_id: int) -> None:
        """Delete a schedule unless a swap request references it"""
        with atomic(self.db):
            schedule = self.get_schedule(schedule_id)
            if self.repo.has_swap_requests(self.db, schedule_id):
                raise ConflictError("Cannot delete a schedule referenced by swap requests")
            self.repo.delete_schedule(self.db, schedule)

        logger.info(f"🗑️ Schedule {schedule_id} deleted")
