from typing import Optional
from datetime import date, datetime

from pydantic import BaseModel
from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field

from agenda_clinica.scheduling.slots import utcnow


# STATUS DO AGENDAMENTO
PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"

# status que ocupam o horário
ACTIVE_STATUSES = (PENDING, CONFIRMED)

_ACTIVE_SLOT_WHERE = text("status IN ('pending', 'confirmed')")


class Appointment(SQLModel, table=True):
    __table_args__ = (
        # um único agendamento ativo por data + horário
        Index(
            "uq_appointment_active_slot",
            "appointment_date",
            "appointment_time",
            unique=True,
            sqlite_where=_ACTIVE_SLOT_WHERE,
            postgresql_where=_ACTIVE_SLOT_WHERE,
        ),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: int = Field(foreign_key="user.id", index=True)
    partner_id: Optional[int] = Field(default=None, foreign_key="user.id", index=True)

    service_slug: str = Field(index=True)
    service_title: str

    appointment_date: date = Field(index=True)
    appointment_time: str  # "HH:MM", um dos TIME_SLOTS

    status: str = Field(default=PENDING, index=True)
    # pending | confirmed | cancelled

    # vínculo com plano de sessões
    plan_id: Optional[int] = Field(default=None, foreign_key="clientplan.id", index=True)
    session_number: Optional[int] = None

    reminder_sent: bool = Field(default=False, index=True)
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column_kwargs={"onupdate": utcnow},
    )
    cancelled_at: Optional[datetime] = None


class AppointmentCreate(BaseModel):
    service_slug: str
    service_title: str
    appointment_date: date
    appointment_time: str
    plan_id: Optional[int] = None
    session_number: Optional[int] = None
    notes: Optional[str] = None


class AdminAppointmentCreate(AppointmentCreate):
    user_id: int
    partner_id: Optional[int] = None
    status: str = PENDING
