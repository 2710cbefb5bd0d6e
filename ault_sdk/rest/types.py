"""
Response models for the paginated REST queries.

Only the fields the SDK reads are declared; everything else in a response
is kept as extra data.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class PageResponse(BaseModel):
    next_key: Optional[str] = None
    total: Optional[str] = None

    class Config:
        extra = "allow"


class OwnedByResponse(BaseModel):
    license_ids: List[str] = []
    pagination: Optional[PageResponse] = None

    class Config:
        extra = "allow"


class EpochsResponse(BaseModel):
    epochs: List[Dict[str, Any]] = []
    pagination: Optional[PageResponse] = None

    class Config:
        extra = "allow"


class OperatorInfoResponse(BaseModel):
    operator: Optional[Dict[str, Any]] = None
    info: Optional[Dict[str, Any]] = None

    class Config:
        extra = "allow"


class LicenseDelegationResponse(BaseModel):
    delegation: Optional[Dict[str, Any]] = None
    is_delegated: bool = False

    class Config:
        extra = "allow"
