"""
Swap request service - Business logic for the swap request workflow

A swap request starts pending and ends approved or rejected; both are
terminal. Approval rewrites the schedules involved, rejection only records
the decision. Each decision runs as one transaction together with the
notification to the requestor.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...database import atomic
from ...models import SwapRequest
from ...services.notification_service import (
    NOTIFICATION_TYPE_SWAP_REQUEST,
    create_notification,
    send_notification_best_effort,
)
from ...shared.errors import ConflictError, InvalidStateError, NotFoundError, NotificationError
from ..scheduling.repository import ScheduleRepository
from .repository import SwapRequestRepository
from .schemas import SwapRequestCreate
from .targets import NoTarget, TargetSchedule, TargetVolunteer, swap_target

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"

CREATED_MESSAGE = "Swap request created successfully"
CREATED_WITHOUT_NOTIFICATION_MESSAGE = (
    "Swap request created successfully, but the notification could not be created"
)


class SwapRequestService:
    """Service layer for swap request business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SwapRequestRepository()
        self.schedules = ScheduleRepository()

    def get_swap_requests(self, status: Optional[str] = None) -> list[SwapRequest]:
        return self.repo.get_swap_requests(self.db, status)

    def get_swap_request(self, swap_request_id: int) -> SwapRequest:
        """Get a specific swap request"""
        swap_request = self.repo.get_swap_request_by_id(self.db, swap_request_id)
        if not swap_request:
            raise NotFoundError("Swap request not found")
        return swap_request

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_swap_request(self, data: SwapRequestCreate) -> tuple[SwapRequest, str]:
        """
        Persist a pending swap request, then notify whoever is asked to cover.

        The notification goes out after the request is committed and may
        fail on its own; the request stays in place either way.

        Returns:
            Tuple of (swap request, outcome message)
        """
        logger.info(f"📥 Creating swap request for schedule {data.requestorScheduleId}")

        with atomic(self.db):
            if not self.schedules.schedule_exists(self.db, data.requestorScheduleId):
                raise NotFoundError("Requestor schedule not found")
            if data.targetScheduleId is not None and not self.schedules.schedule_exists(
                self.db, data.targetScheduleId
            ):
                raise NotFoundError("Target schedule not found")
            if data.targetVolunteerId is not None and not self.schedules.volunteer_exists(
                self.db, data.targetVolunteerId
            ):
                raise NotFoundError("Target volunteer not found")

            swap_request = self.repo.create_swap_request(
                self.db,
                requestor_schedule_id=data.requestorScheduleId,
                target_schedule_id=data.targetScheduleId,
                target_volunteer_id=data.targetVolunteerId,
                reason=data.reason or "",
                status=STATUS_PENDING,
            )
            event_title = self.repo.get_event_title(self.db, data.requestorScheduleId)

        logger.info(f"✅ Swap request {swap_request.id} created")

        result = send_notification_best_effort(
            self.db,
            lambda: self._creation_recipient(swap_request),
            "New swap request",
            f"There is a new swap request for event {event_title}",
            NOTIFICATION_TYPE_SWAP_REQUEST,
        )
        if not result["notification_sent"]:
            logger.warning(
                f"⚠️ Swap request {swap_request.id} created without notification: "
                f"{result['notification_error']}"
            )
            return swap_request, CREATED_WITHOUT_NOTIFICATION_MESSAGE

        return swap_request, CREATED_MESSAGE

    def _creation_recipient(self, swap_request: SwapRequest) -> int:
        target = swap_target(swap_request)
        if isinstance(target, TargetSchedule):
            user_id = self.repo.get_schedule_user_id(self.db, target.schedule_id)
        elif isinstance(target, TargetVolunteer):
            user_id = self.repo.get_volunteer_user_id(self.db, target.volunteer_id)
        else:
            user_id = self.repo.get_team_leader_id(self.db, swap_request.requestor_schedule_id)

        if user_id is None:
            raise NotificationError("No recipient found for the swap request notification")
        return user_id

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def approve_swap_request(self, swap_request_id: int) -> SwapRequest:
        """Approve a pending swap request and apply it to the schedules"""
        return self._decide(swap_request_id, STATUS_APPROVED)

    def reject_swap_request(self, swap_request_id: int) -> SwapRequest:
        """Reject a pending swap request; schedules are left untouched"""
        return self._decide(swap_request_id, STATUS_REJECTED)

    def _decide(self, swap_request_id: int, new_status: str) -> SwapRequest:
        logger.info(f"🔄 Swap request {swap_request_id}: pending -> {new_status}")

        with atomic(self.db):
            swap_request = self.repo.get_swap_request_for_update(self.db, swap_request_id)
            if not swap_request:
                raise NotFoundError("Swap request not found")
            if swap_request.status != STATUS_PENDING:
                raise InvalidStateError(f"Swap request is already {swap_request.status}")

            # Read before any schedule moves: the requestor schedule may change hands
            requestor_user_id = self.repo.get_schedule_user_id(
                self.db, swap_request.requestor_schedule_id
            )
            event_title = self.repo.get_event_title(self.db, swap_request.requestor_schedule_id)
            if requestor_user_id is None:
                raise NotificationError("Requestor user not found")

            if not self.repo.transition_status(self.db, swap_request_id, new_status):
                raise InvalidStateError("Swap request is no longer pending")

            if new_status == STATUS_APPROVED:
                self._apply(swap_request)

            create_notification(
                self.db,
                requestor_user_id,
                f"Swap request {new_status}",
                f"Your swap request for event {event_title} was {new_status}",
                NOTIFICATION_TYPE_SWAP_REQUEST,
            )

        logger.info(f"✅ Swap request {swap_request_id} {new_status}")
        return swap_request

    def _apply(self, swap_request: SwapRequest) -> None:
        target = swap_target(swap_request)
        requestor_id = swap_request.requestor_schedule_id

        if isinstance(target, TargetSchedule):
            locked = self.schedules.lock_schedules(self.db, [requestor_id, target.schedule_id])
            requestor = locked.get(requestor_id)
            other = locked.get(target.schedule_id)
            if requestor is None or other is None:
                raise NotFoundError("Schedule not found")
            if requestor.event_id == other.event_id:
                raise ConflictError("Cannot swap between two schedules of the same event")

            exclude = [requestor.id, other.id]
            if self.schedules.is_already_scheduled(
                self.db, requestor.event_id, other.volunteer_id, exclude_ids=exclude
            ) or self.schedules.is_already_scheduled(
                self.db, other.event_id, requestor.volunteer_id, exclude_ids=exclude
            ):
                raise ConflictError("Swap would schedule a volunteer twice for the same event")

            requestor_volunteer_id = requestor.volunteer_id
            self.schedules.update_schedule(self.db, requestor, volunteer_id=other.volunteer_id)
            self.schedules.update_schedule(self.db, other, volunteer_id=requestor_volunteer_id)
            logger.info(f"🔁 Exchanged volunteers between schedules {requestor.id} and {other.id}")

        elif isinstance(target, TargetVolunteer):
            requestor = self._lock_one(requestor_id)
            if self.schedules.is_already_scheduled(
                self.db, requestor.event_id, target.volunteer_id, exclude_ids=[requestor.id]
            ):
                raise ConflictError("Target volunteer is already scheduled for this event")

            self.schedules.update_schedule(self.db, requestor, volunteer_id=target.volunteer_id)
            logger.info(f"👤 Schedule {requestor.id} handed to volunteer {target.volunteer_id}")

        elif isinstance(target, NoTarget):
            requestor = self._lock_one(requestor_id)
            self.schedules.update_schedule(self.db, requestor, status="cancelled")
            logger.info(f"🚫 Schedule {requestor.id} cancelled")

    def _lock_one(self, schedule_id: int):
        schedule = self.schedules.lock_schedules(self.db, [schedule_id]).get(schedule_id)
        if schedule is None:
            raise NotFoundError("Schedule not found")
        return schedule
