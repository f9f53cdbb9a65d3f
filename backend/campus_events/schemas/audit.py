from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AdminSummary(BaseModel):
    id: int
    name: str
    email: str

    model_config = {"from_attributes": True}


class AuditLogResponse(BaseModel):
    id: int
    action: str
    target_type: str
    target_id: int
    actor_admin_id: Optional[int]
    timestamp: datetime
    admin: Optional[AdminSummary] = None

    model_config = {"from_attributes": True}


class AuditLogPage(BaseModel):
    logs: list[AuditLogResponse]
    total_pages: int
    current_page: int
