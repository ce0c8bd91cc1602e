"""
Pydantic schemas for API requests
"""

from typing import Dict, Optional
from pydantic import BaseModel, Field

from ..keys import KeyInput


class SelectDirectoryRequest(BaseModel):
    directory: Optional[str] = Field(None, description="Directory to use; omit to ask the host picker")


class WriteRecordRequest(BaseModel):
    account_number: str = Field(..., description="Account number to record")


class UpdateFieldRequest(BaseModel):
    column_id: str = Field(..., description="amount, activated or an extra column id")
    value: str


class ColumnConfigModel(BaseModel):
    accountNumber: str
    amount: str
    activated: str
    extra: Dict[str, str] = Field(default_factory=dict)


class KeyInputModel(BaseModel):
    key: Optional[str] = None
    char: Optional[str] = None
    code: Optional[str] = None
    shift: bool = False
    ctrl: bool = False
    meta: bool = False
    alt: bool = False

    def to_key_input(self) -> KeyInput:
        return KeyInput(
            key=self.key,
            char=self.char,
            code=self.code,
            shift=self.shift,
            ctrl=self.ctrl,
            meta=self.meta,
            alt=self.alt
        )


class SwipeRequest(BaseModel):
    data: str = Field(..., description="Complete raw swipe payload")
