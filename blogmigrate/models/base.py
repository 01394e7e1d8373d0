"""
Base model with the fields every stored record carries.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from blogmigrate.core.time_utils import utc_now


class BaseModel(SQLModel):
    """
    Common id and timestamp columns.

    Timestamps default to now but can be supplied explicitly so migrated
    records keep the dates they had in the source store.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)
    created_at: Optional[datetime] = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
    updated_at: Optional[datetime] = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
