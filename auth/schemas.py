from pydantic import BaseModel, ConfigDict, EmailStr
from typing import Literal, Optional


Role = Literal["customer", "seller", "admin"]


class UserLogin(BaseModel):
    # profile fields from the identity provider (photo, provider id, ...) are kept as sent
    model_config = ConfigDict(extra="allow")

    email: EmailStr
    name: Optional[str] = None
    image: Optional[str] = None


class RoleInfo(BaseModel):
    role: Role


class RoleUpdate(BaseModel):
    email: EmailStr
    role: Role
