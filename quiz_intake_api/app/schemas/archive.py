"""
Pydantic schemas for the archive export.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ArchiveRecord(BaseModel):
    """One flattened registration/result pair.

    ``date`` is the result's timestamp, or the registration's when the
    registrant has not submitted a test yet.
    """

    registration_id: str = Field(..., alias="registrationId")
    fio: str = Field(..., description="Last name and first name separated by a space")
    age: int
    phone: str
    telegram: str
    level: Optional[str] = None
    score: Optional[int] = None
    test_type: Optional[str] = Field(None, alias="testType")
    date: datetime

    model_config = {
        "populate_by_name": True,
    }


class ArchiveResponse(BaseModel):
    success: bool = True
    records: List[ArchiveRecord]
    count: int
