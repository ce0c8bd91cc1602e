"""
Ledger file endpoints
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends

from .deps import get_service
from .schemas import SelectDirectoryRequest
from ..service import LedgerService


router = APIRouter()


@router.get("/path")
async def get_ledger_path(service: LedgerService = Depends(get_service)) -> Dict[str, Any]:
    """Full path of the ledger file"""
    return service.ledger_path()


@router.get("/directory")
async def get_ledger_directory(service: LedgerService = Depends(get_service)) -> Dict[str, Any]:
    return service.ledger_directory()


@router.post("/directory")
def select_ledger_directory(
    request: Optional[SelectDirectoryRequest] = None,
    service: LedgerService = Depends(get_service)
) -> Dict[str, Any]:
    """Set the ledger directory, or ask the host picker when none is given"""
    directory = request.directory if request else None
    return service.select_ledger_directory(directory)


@router.post("/open")
def open_ledger_file(service: LedgerService = Depends(get_service)) -> Dict[str, Any]:
    return service.open_ledger_file()


@router.post("/deduplicate")
def deduplicate_ledger(service: LedgerService = Depends(get_service)) -> Dict[str, Any]:
    """Remove duplicate account numbers and re-sort the ledger"""
    return service.deduplicate_ledger()
