from typing import Optional
from datetime import datetime

from pydantic import BaseModel, Field as PydanticField
from sqlmodel import SQLModel, Field

from agenda_clinica.scheduling.slots import utcnow


PLAN_ACTIVE = "active"
PLAN_COMPLETED = "completed"


class ClientPlan(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="user.id", index=True)

    service_slug: str
    service_title: str
    plan_name: str = "Essencial"

    total_sessions: int
    completed_sessions: int = 0

    status: str = Field(default=PLAN_ACTIVE, index=True)
    # active | completed

    created_by: str = "admin"  # admin | sale
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column_kwargs={"onupdate": utcnow},
    )


class ClientPlanCreate(BaseModel):
    user_id: int
    service_slug: str
    service_title: str
    plan_name: str = "Essencial"
    total_sessions: int = PydanticField(ge=1)
    notes: Optional[str] = None


class SessionAdjust(BaseModel):
    delta: int
