"""
Swipe capture endpoints
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends

from .deps import get_service
from .schemas import KeyInputModel, SwipeRequest
from ..service import LedgerService


router = APIRouter()


@router.post("/start")
def start_capture(service: LedgerService = Depends(get_service)) -> Dict[str, Any]:
    return service.start_capture()


@router.post("/stop")
def stop_capture(service: LedgerService = Depends(get_service)) -> Dict[str, Any]:
    """Stop capture; a partially buffered swipe is discarded"""
    return service.stop_capture()


@router.get("/status")
def capture_status(service: LedgerService = Depends(get_service)) -> Dict[str, Any]:
    return service.capture_status()


@router.post("/input")
def key_input(
    request: KeyInputModel,
    service: LedgerService = Depends(get_service)
) -> Dict[str, Any]:
    """Deliver one raw key event from the host"""
    return service.handle_key(request.to_key_input())


@router.post("/swipe")
def submit_swipe(
    request: SwipeRequest,
    service: LedgerService = Depends(get_service)
) -> Dict[str, Any]:
    """Process a complete payload, for hosts that assemble swipes themselves"""
    if not service.controller.is_active:
        return {"success": False, "error": "Capture is not active"}
    event = service.controller.submit_payload(request.data)
    return {"success": True, "event": event.to_dict()}


@router.get("/events")
def recent_events(
    after: Optional[str] = None,
    service: LedgerService = Depends(get_service)
) -> Dict[str, Any]:
    """Outcome events published since the given event id"""
    return service.recent_outcomes(after)
