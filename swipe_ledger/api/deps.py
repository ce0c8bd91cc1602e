"""
Service dependency for API routes
"""

from typing import Optional

from ..service import LedgerService


_service: Optional[LedgerService] = None


def get_service() -> LedgerService:
    """Get the process-wide ledger service, creating it on first use"""
    global _service
    if _service is None:
        _service = LedgerService()
    return _service


def set_service(service: Optional[LedgerService]) -> None:
    """Replace the process-wide ledger service"""
    global _service
    _service = service
