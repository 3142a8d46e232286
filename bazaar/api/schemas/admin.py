"""
Admin dashboard schemas.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ...auth.roles import Role


class RoleChangeRequest(BaseModel):
    role: Role = Field(..., description="Role to grant")


class UserRolesResponse(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None
    created_at: datetime
    roles: List[str] = Field(default_factory=list)


class RoleChangeResponse(BaseModel):
    user_id: UUID
    roles: List[str] = Field(..., description="Roles held after the change")
    message: str
