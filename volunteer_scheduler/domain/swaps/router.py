"""Swap request router - FastAPI endpoints for the swap request workflow"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...schemas import PathId, api_response
from ...shared.errors import ValidationError
from ...shared.validators import validate_swap_status_filter
from .schemas import SwapRequestCreate, SwapRequestDetailResponse, SwapRequestResponse
from .service import SwapRequestService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/swap-requests", tags=["Swap Requests"])


def get_swap_request_service(db: Session = Depends(get_db)) -> SwapRequestService:
    """Dependency injection for SwapRequestService"""
    return SwapRequestService(db)


@router.get("")
def get_swap_requests(
    status: Optional[str] = Query(None),
    service: SwapRequestService = Depends(get_swap_request_service),
):
    """Get swap requests with event and volunteer detail, optionally by status"""
    try:
        status = validate_swap_status_filter(status)
    except ValueError as e:
        raise ValidationError(str(e)) from e

    swap_requests = service.get_swap_requests(status)
    return api_response(
        data=[SwapRequestDetailResponse.from_swap_request(sr) for sr in swap_requests]
    )


@router.get("/{swap_request_id}")
def get_swap_request(
    swap_request_id: PathId,
    service: SwapRequestService = Depends(get_swap_request_service),
):
    swap_request = service.get_swap_request(swap_request_id)
    return api_response(data=SwapRequestDetailResponse.from_swap_request(swap_request))


@router.post("")
def create_swap_request(
    data: SwapRequestCreate,
    service: SwapRequestService = Depends(get_swap_request_service),
):
    """Create a pending swap request and notify the person asked to cover"""
    swap_request, message = service.create_swap_request(data)
    return api_response(
        data=SwapRequestResponse.from_swap_request(swap_request),
        message=message,
        status_code=201,
    )


@router.put("/{swap_request_id}/approve")
def approve_swap_request(
    swap_request_id: PathId,
    service: SwapRequestService = Depends(get_swap_request_service),
):
    swap_request = service.approve_swap_request(swap_request_id)
    return api_response(
        data=SwapRequestResponse.from_swap_request(swap_request),
        message="Swap request approved successfully",
    )


@router.put("/{swap_request_id}/reject")
def reject_swap_request(
    swap_request_id: PathId,
    service: SwapRequestService = Depends(get_swap_request_service),
):
    swap_request = service.reject_swap_request(swap_request_id)
    return api_response(
        data=SwapRequestResponse.from_swap_request(swap_request),
        message="Swap request rejected successfully",
    )
