from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from services.permissions import Role


class UserCreate(BaseModel):
    telegram_id: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    primary_phone: str = Field(min_length=10, max_length=20)
    secondary_phone: Optional[str] = Field(default=None, max_length=20)
    district: str = Field(min_length=1, max_length=100)
    language: str = "English"


class UserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    primary_phone: Optional[str] = Field(default=None, min_length=10, max_length=20)
    secondary_phone: Optional[str] = Field(default=None, max_length=20)
    district: Optional[str] = Field(default=None, min_length=1, max_length=100)
    language: Optional[str] = None


class RoleResponse(BaseModel):
    telegram_id: str
    role: Role
    district: Optional[str] = None

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    telegram_id: str
    name: str
    primary_phone: str
    secondary_phone: Optional[str] = None
    district: str
    language: str
    registered_at: datetime
    roles: List[RoleResponse] = []

    class Config:
        from_attributes = True


class CurrentUserResponse(BaseModel):
    telegram_id: str
    name: Optional[str] = None
    district: Optional[str] = None
    roles: List[Role]
    registered: bool


class UserListResponse(BaseModel):
    users: List[UserResponse]
    total: int


class UserInfoUpdate(BaseModel):
    """Whole-record address profile; omitted optional fields are cleared"""
    name: str = Field(min_length=1, max_length=200)
    house_name: Optional[str] = None
    landmark: Optional[str] = None
    ward_no: Optional[str] = None
    panchayat: Optional[str] = None
    block: Optional[str] = None
    sub_district: Optional[str] = None
    district: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    primary_phone: str = Field(min_length=10, max_length=20)
    secondary_phone: Optional[str] = None


class UserInfoResponse(UserInfoUpdate):
    telegram_id: str
    updated_at: datetime

    class Config:
        from_attributes = True
