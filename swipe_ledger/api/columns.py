"""
Column configuration endpoints
"""

from typing import Any, Dict
from fastapi import APIRouter, Depends

from .deps import get_service
from .schemas import ColumnConfigModel
from ..service import LedgerService


router = APIRouter()


@router.get("")
def get_columns(service: LedgerService = Depends(get_service)) -> Dict[str, Any]:
    return service.get_column_config()


@router.put("")
def save_columns(
    request: ColumnConfigModel,
    service: LedgerService = Depends(get_service)
) -> Dict[str, Any]:
    """Save header names; an existing ledger is rewritten with the new header"""
    return service.save_column_config(request.model_dump())
