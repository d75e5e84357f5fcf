from datetime import date
from typing import Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, status
from pydantic import BaseModel
from sqlmodel import Session

from agenda_clinica.core.deps import get_gateway, get_notification_config
from agenda_clinica.core.security import get_current_admin, get_current_user
from agenda_clinica.database import get_session
from agenda_clinica.models.appointment import AdminAppointmentCreate, AppointmentCreate, CONFIRMED
from agenda_clinica.models.user import User
from agenda_clinica.scheduling.slots import clinic_now, date_closed_reason, describe_day
from agenda_clinica.services import reservations
from agenda_clinica.services.availability import occupied_slots
from agenda_clinica.services.notification_config import NotificationConfig
from agenda_clinica.services.notifications import enqueue_new_appointment_alerts
from agenda_clinica.services.post_commit import PostCommitTasks
from agenda_clinica.services.reaper import reap_stale_pending


router = APIRouter(prefix="/appointments", tags=["appointments"])


class PartnerAssign(BaseModel):
    partner_id: Optional[int] = None


def _notify_staff(session, config, gateway, appointment, background_tasks: BackgroundTasks):
    tasks = PostCommitTasks()
    enqueue_new_appointment_alerts(session, config, gateway, [appointment], tasks)
    if len(tasks):
        background_tasks.add_task(tasks.drain)


# =========================
# HORÁRIOS DO DIA
# GET /appointments/availability?day=2026-02-14
# =========================
@router.get("/availability")
def get_availability(
    day: date,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> Dict:
    now = clinic_now()

    # datas fechadas não consultam o banco: nenhum horário é oferecido
    if date_closed_reason(day, now.date()):
        return describe_day(day, [], now)

    return describe_day(day, occupied_slots(session, day), now)


# =========================
# CRIAR AGENDAMENTO (CLIENTE)
# =========================
@router.post("/", status_code=status.HTTP_201_CREATED)
def create_appointment(
    payload: AppointmentCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
    config: NotificationConfig = Depends(get_notification_config),
    gateway=Depends(get_gateway),
):
    # autoatendimento sempre grava como confirmado
    appointment = reservations.create_appointment(session, current_user.id, payload, status=CONFIRMED)
    _notify_staff(session, config, gateway, appointment, background_tasks)
    return appointment


# =========================
# VENDA NO BALCÃO (ADMIN)
# pode nascer "pending" aguardando pagamento
# =========================
@router.post("/admin", status_code=status.HTTP_201_CREATED)
def create_appointment_for_client(
    payload: AdminAppointmentCreate,
    background_tasks: BackgroundTasks,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
    config: NotificationConfig = Depends(get_notification_config),
    gateway=Depends(get_gateway),
):
    appointment = reservations.create_appointment(
        session,
        payload.user_id,
        payload,
        status=payload.status,
        partner_id=payload.partner_id,
    )
    _notify_staff(session, config, gateway, appointment, background_tasks)
    return appointment


# =========================
# LISTAR AGENDAMENTOS
# - cliente: só os próprios
# - parceira: só os atribuídos a ela
# - admin: todos
# =========================
@router.get("/")
def list_appointments(
    day: Optional[date] = None,
    status: Optional[str] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return reservations.list_appointments(session, current_user, day=day, status=status)


@router.patch("/{appointment_id}/confirm")
def confirm_appointment(
    appointment_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return reservations.confirm_appointment(session, appointment_id, current_user)


@router.patch("/{appointment_id}/cancel")
def cancel_appointment(
    appointment_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return reservations.cancel_appointment(session, appointment_id, current_user)


@router.patch("/{appointment_id}/partner")
def assign_partner(
    appointment_id: int,
    payload: PartnerAssign,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    return reservations.assign_partner(session, appointment_id, payload.partner_id)


# =========================
# EXPIRAR RESERVAS ABANDONADAS (ADMIN)
# =========================
@router.post("/reap")
def reap_pending(
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    return {"cancelled": reap_stale_pending(session)}
