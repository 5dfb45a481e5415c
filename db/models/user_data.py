"""
db/models/user_data.py

UserData model: one row per ingested user record.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy import Boolean, Date, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class UserData(Base):
    """
    Flat user record populated by CSV bulk uploads and served paginated.

    Identity is assigned by the database on insert; uploads never carry it.
    """

    __tablename__ = "user_data"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(150), nullable=False)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    company: Mapped[str | None] = mapped_column(String(100), nullable=True)
    salary: Mapped[float] = mapped_column(Float, nullable=False)
    date_joined: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    __table_args__ = (
        Index("ix_user_data_email", "email"),
    )

    def __repr__(self) -> str:
        return f"<UserData id={self.id} email={self.email!r}>"
