from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime

from storefront.models.base import timestamp_column, utcnow


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    first_name: str
    last_name: str
    email: str = Field(index=True, unique=True)
    role: str = Field(default="user")
    can_login: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
