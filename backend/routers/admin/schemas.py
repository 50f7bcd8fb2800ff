from pydantic import BaseModel, Field
from typing import Optional

from services.permissions import Role


class RoleAssignRequest(BaseModel):
    telegram_id: str = Field(min_length=1, max_length=50)
    role: Role
    district: Optional[str] = Field(default=None, max_length=100)


class SettingUpdate(BaseModel):
    key: str = Field(min_length=1, max_length=100)
    value: str


class SettingResponse(BaseModel):
    key: str
    value: str

    class Config:
        from_attributes = True
