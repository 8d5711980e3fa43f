"""Shared validation utilities"""

from typing import Optional

SCHEDULE_STATUSES = ("confirmed", "pending", "cancelled")
SWAP_REQUEST_STATUSES = ("pending", "approved", "rejected")

MAX_REASON_LENGTH = 2000

# Largest value a BIGINT / SQLite INTEGER column can hold
MAX_ID = 2**63 - 1


def validate_positive_id(value: Optional[int]) -> Optional[int]:
    """
    Validate an optional entity id.

    Raises:
        ValueError: If the id is zero, negative or beyond MAX_ID
    """
    if value is None:
        return value
    if value <= 0:
        raise ValueError("ID must be a positive integer")
    if value > MAX_ID:
        raise ValueError("ID is out of range")
    return value


def validate_schedule_status(status: Optional[str]) -> Optional[str]:
    """
    Normalize a schedule status; empty means "use the default".

    Raises:
        ValueError: If the status is not a known schedule status
    """
    if status is None:
        return None
    status = status.strip().lower()
    if not status:
        return None
    if status not in SCHEDULE_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(SCHEDULE_STATUSES)}")
    return status


def validate_swap_status_filter(status: Optional[str]) -> Optional[str]:
    if not status:
        return None
    status = status.strip().lower()
    if status not in SWAP_REQUEST_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(SWAP_REQUEST_STATUSES)}")
    return status


def validate_reason(reason: Optional[str]) -> str:
    """Strip free-text reason; None becomes an empty string"""
    if reason is None:
        return ""
    reason = reason.strip()
    if len(reason) > MAX_REASON_LENGTH:
        raise ValueError(f"Reason must be at most {MAX_REASON_LENGTH} characters")
    return reason
