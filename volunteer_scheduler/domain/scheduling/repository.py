"""Schedule repository - Database operations for schedules"""

from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from sqlalchemy import exists, or_, select
from sqlalchemy.orm import Session, joinedload

from ...models import Event, Schedule, SwapRequest, User, Volunteer


class ScheduleRepository:
    """Repository for schedule database operations"""

    @staticmethod
    def get_schedules(db: Session) -> list[Schedule]:
        """Get all schedules, newest first"""
        return db.query(Schedule).order_by(Schedule.created_at.desc(), Schedule.id.desc()).all()

    @staticmethod
    def get_schedule_by_id(db: Session, schedule_id: int) -> Optional[Schedule]:
        return db.query(Schedule).filter(Schedule.id == schedule_id).first()

    @staticmethod
    def get_schedules_by_event(db: Session, event_id: int) -> list[Schedule]:
        """Get schedules of an event with volunteer, user, team and role loaded"""
        return (
            db.query(Schedule)
            .options(
                joinedload(Schedule.volunteer).joinedload(Volunteer.user),
                joinedload(Schedule.volunteer).joinedload(Volunteer.team),
                joinedload(Schedule.volunteer).joinedload(Volunteer.role),
            )
            .filter(Schedule.event_id == event_id)
            .order_by(Schedule.id.asc())
            .all()
        )

    @staticmethod
    def get_schedules_by_volunteer(db: Session, volunteer_id: int) -> list[Schedule]:
        """Get schedules of a volunteer with their event, latest event first"""
        return (
            db.query(Schedule)
            .join(Event, Schedule.event_id == Event.id)
            .options(joinedload(Schedule.event))
            .filter(Schedule.volunteer_id == volunteer_id)
            .order_by(Event.event_date.desc())
            .all()
        )

    @staticmethod
    def get_event_by_id(db: Session, event_id: int) -> Optional[Event]:
        return db.query(Event).filter(Event.id == event_id).first()

    @staticmethod
    def event_exists(db: Session, event_id: int) -> bool:
        return db.query(exists().where(Event.id == event_id)).scalar()

    @staticmethod
    def volunteer_exists(db: Session, volunteer_id: int) -> bool:
        return db.query(exists().where(Volunteer.id == volunteer_id)).scalar()

    @staticmethod
    def user_exists(db: Session, user_id: int) -> bool:
        return db.query(exists().where(User.id == user_id)).scalar()

    @staticmethod
    def schedule_exists(db: Session, schedule_id: int) -> bool:
        return db.query(exists().where(Schedule.id == schedule_id)).scalar()

    @staticmethod
    def is_already_scheduled(
        db: Session, event_id: int, volunteer_id: int, exclude_ids: Iterable[int] = ()
    ) -> bool:
        """Check whether the (event, volunteer) pair is taken by a schedule outside exclude_ids"""
        query = db.query(Schedule.id).filter(
            Schedule.event_id == event_id, Schedule.volunteer_id == volunteer_id
        )
        exclude_ids = list(exclude_ids)
        if exclude_ids:
            query = query.filter(Schedule.id.notin_(exclude_ids))
        return query.first() is not None

    @staticmethod
    def get_volunteer_schedules_between(
        db: Session,
        volunteer_id: int,
        start: datetime,
        end: datetime,
        exclude_event_id: Optional[int] = None,
    ) -> list[Schedule]:
        """Schedules of a volunteer whose event falls in [start, end)"""
        query = (
            db.query(Schedule)
            .join(Event, Schedule.event_id == Event.id)
            .filter(
                Schedule.volunteer_id == volunteer_id,
                Event.event_date >= start,
                Event.event_date < end,
            )
        )
        if exclude_event_id is not None:
            query = query.filter(Event.id != exclude_event_id)
        return query.all()

    @staticmethod
    def get_schedules_with_event_and_volunteer(db: Session) -> list[Schedule]:
        """Every schedule with its event and volunteer's user loaded, for the conflict report"""
        return (
            db.query(Schedule)
            .join(Event, Schedule.event_id == Event.id)
            .options(
                joinedload(Schedule.event),
                joinedload(Schedule.volunteer).joinedload(Volunteer.user),
            )
            .order_by(Event.event_date.asc(), Schedule.id.asc())
            .all()
        )

    @staticmethod
    def lock_schedules(db: Session, schedule_ids: Iterable[int]) -> dict[int, Schedule]:
        """
        Lock schedule rows FOR UPDATE, always in ascending id order so two
        transactions touching overlapping pairs cannot deadlock.
        """
        ids = sorted(set(schedule_ids))
        rows = (
            db.execute(
                select(Schedule)
                .where(Schedule.id.in_(ids))
                .order_by(Schedule.id.asc())
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            .scalars()
            .all()
        )
        return {s.id: s for s in rows}

    @staticmethod
    def create_schedule(db: Session, **schedule_data) -> Schedule:
        """Create a new schedule (flushed, not committed)"""
        schedule = Schedule(**schedule_data)
        db.add(schedule)
        db.flush()
        return schedule

    @staticmethod
    def update_schedule(db: Session, schedule: Schedule, **updates) -> Schedule:
        """Apply updates to a schedule (flushed, not committed)"""
        for key, value in updates.items():
            if hasattr(schedule, key):
                setattr(schedule, key, value)
        db.flush()
        return schedule

    @staticmethod
    def delete_schedule(db: Session, schedule: Schedule) -> None:
        db.delete(schedule)
        db.flush()

    @staticmethod
    def has_swap_requests(db: Session, schedule_id: int) -> bool:
        """Check whether any swap request references the schedule as requestor or target"""
        return db.query(
            exists().where(
                or_(
                    SwapRequest.requestor_schedule_id == schedule_id,
                    SwapRequest.target_schedule_id == schedule_id,
                )
            )
        ).scalar()
