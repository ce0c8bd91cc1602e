"""
Account record endpoints
"""

from typing import Any, Dict
from fastapi import APIRouter, Depends, Query

from .deps import get_service
from .schemas import UpdateFieldRequest, WriteRecordRequest
from ..service import LedgerService


router = APIRouter()


@router.post("")
def write_record(
    request: WriteRecordRequest,
    service: LedgerService = Depends(get_service)
) -> Dict[str, Any]:
    """Manually enter an account number"""
    return service.write_record(request.account_number)


@router.get("")
def get_records(
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    service: LedgerService = Depends(get_service)
) -> Dict[str, Any]:
    return service.get_records(page, page_size)


@router.get("/count")
def get_record_count(service: LedgerService = Depends(get_service)) -> Dict[str, Any]:
    return service.get_record_count()


@router.patch("/{account_number}")
def update_record_field(
    account_number: str,
    request: UpdateFieldRequest,
    service: LedgerService = Depends(get_service)
) -> Dict[str, Any]:
    """Edit a single field of a record"""
    return service.update_record_field(account_number, request.column_id, request.value)
