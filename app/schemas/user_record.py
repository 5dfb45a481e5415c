"""
app/schemas/user_record.py

Response schemas for the records endpoint.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel


class UserRecordResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    age: int
    gender: str | None
    department: str | None
    company: str | None
    salary: float
    date_joined: date | None
    is_active: bool

    model_config = {"from_attributes": True}
