"""Swap request repository - Database operations for swap requests"""

from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session, joinedload

from ...models import Event, Schedule, SwapRequest, Team, Volunteer


class SwapRequestRepository:
    """Repository for swap request database operations"""

    @staticmethod
    def get_swap_requests(db: Session, status: Optional[str] = None) -> list[SwapRequest]:
        """Get swap requests newest first, with both schedules' events and volunteers loaded"""
        query = db.query(SwapRequest).options(
            joinedload(SwapRequest.requestor_schedule).joinedload(Schedule.event),
            joinedload(SwapRequest.requestor_schedule)
            .joinedload(Schedule.volunteer)
            .joinedload(Volunteer.user),
            joinedload(SwapRequest.target_schedule).joinedload(Schedule.event),
            joinedload(SwapRequest.target_schedule)
            .joinedload(Schedule.volunteer)
            .joinedload(Volunteer.user),
            joinedload(SwapRequest.target_volunteer).joinedload(Volunteer.user),
        )

        if status:
            query = query.filter(SwapRequest.status == status)

        return query.order_by(SwapRequest.created_at.desc(), SwapRequest.id.desc()).all()

    @staticmethod
    def get_swap_request_by_id(db: Session, swap_request_id: int) -> Optional[SwapRequest]:
        return db.query(SwapRequest).filter(SwapRequest.id == swap_request_id).first()

    @staticmethod
    def get_swap_request_for_update(db: Session, swap_request_id: int) -> Optional[SwapRequest]:
        """Load a swap request and hold its row lock until the transaction ends"""
        return db.execute(
            select(SwapRequest)
            .where(SwapRequest.id == swap_request_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    @staticmethod
    def create_swap_request(db: Session, **swap_data) -> SwapRequest:
        """Create a new swap request (flushed, not committed)"""
        swap_request = SwapRequest(**swap_data)
        db.add(swap_request)
        db.flush()
        return swap_request

    @staticmethod
    def transition_status(db: Session, swap_request_id: int, new_status: str) -> bool:
        """
        Move a pending swap request to new_status.

        Returns False when the row was no longer pending, which is how a
        second concurrent approval or rejection finds out it lost.
        """
        result = db.execute(
            update(SwapRequest)
            .where(SwapRequest.id == swap_request_id, SwapRequest.status == "pending")
            .values(status=new_status)
        )
        return result.rowcount == 1

    # ------------------------------------------------------------------
    # Notification recipient lookups
    # ------------------------------------------------------------------

    @staticmethod
    def get_schedule_user_id(db: Session, schedule_id: int) -> Optional[int]:
        """User behind the volunteer holding a schedule"""
        return db.execute(
            select(Volunteer.user_id)
            .join(Schedule, Schedule.volunteer_id == Volunteer.id)
            .where(Schedule.id == schedule_id)
        ).scalar_one_or_none()

    @staticmethod
    def get_volunteer_user_id(db: Session, volunteer_id: int) -> Optional[int]:
        return db.execute(
            select(Volunteer.user_id).where(Volunteer.id == volunteer_id)
        ).scalar_one_or_none()

    @staticmethod
    def get_team_leader_id(db: Session, schedule_id: int) -> Optional[int]:
        """Leader of the team the schedule's volunteer belongs to"""
        return db.execute(
            select(Team.leader_id)
            .join(Volunteer, Volunteer.team_id == Team.id)
            .join(Schedule, Schedule.volunteer_id == Volunteer.id)
            .where(Schedule.id == schedule_id)
        ).scalar_one_or_none()

    @staticmethod
    def get_event_title(db: Session, schedule_id: int) -> Optional[str]:
        return db.execute(
            select(Event.title)
            .join(Schedule, Schedule.event_id == Event.id)
            .where(Schedule.id == schedule_id)
        ).scalar_one_or_none()
