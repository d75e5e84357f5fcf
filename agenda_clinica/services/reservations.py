import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from agenda_clinica.core.errors import (
    BookingRuleViolation,
    InvalidTransition,
    NotFound,
    PermissionDenied,
    PlanValidationError,
    ReservationFailed,
    SlotTaken,
)
from agenda_clinica.models.appointment import (
    ACTIVE_STATUSES,
    CANCELLED,
    CONFIRMED,
    PENDING,
    Appointment,
    AppointmentCreate,
)
from agenda_clinica.models.client_plan import ClientPlan
from agenda_clinica.models.user import User
from agenda_clinica.scheduling.slots import TIME_SLOTS, clinic_now, date_closed_reason, is_slot_past, utcnow
from agenda_clinica.services.reaper import reap_stale_pending

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS = {
    PENDING: {CONFIRMED, CANCELLED},
    CONFIRMED: {CANCELLED},
    CANCELLED: set(),
}


def _check_booking_rules(data: AppointmentCreate, now: datetime) -> None:
    if data.appointment_time not in TIME_SLOTS:
        raise BookingRuleViolation(f"Horário inválido: {data.appointment_time}")

    reason = date_closed_reason(data.appointment_date, now.date())
    if reason:
        raise BookingRuleViolation(reason)

    if is_slot_past(data.appointment_date, data.appointment_time, now):
        raise BookingRuleViolation("Esse horário já passou")


def _get_partner(session: Session, partner_id: int) -> User:
    partner = session.get(User, partner_id)
    if not partner or partner.role != "partner":
        raise NotFound("Parceira não encontrada")
    return partner


def _check_people(session: Session, client_id: int, partner_id: Optional[int]) -> None:
    if not session.get(User, client_id):
        raise NotFound("Cliente não encontrado")
    if partner_id is not None:
        _get_partner(session, partner_id)


def _check_plan(session: Session, client_id: int, data: AppointmentCreate) -> None:
    if data.session_number is not None and data.plan_id is None:
        raise PlanValidationError("session_number exige plan_id")
    if data.plan_id is None:
        return

    plan = session.get(ClientPlan, data.plan_id)
    if not plan or plan.user_id != client_id:
        raise PlanValidationError("Plano não encontrado para este cliente")

    if data.session_number is None:
        return
    if data.session_number < 1 or data.session_number > plan.total_sessions:
        raise PlanValidationError(
            f"Sessão {data.session_number} fora do plano ({plan.total_sessions} sessões)"
        )


# =========================
# GRAVAR AGENDAMENTO
# =========================
def create_appointment(
    session: Session,
    client_id: int,
    data: AppointmentCreate,
    status: str = CONFIRMED,
    partner_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Appointment:
    """Grava um agendamento para o cliente.

    Regras de data/horário e de plano são checadas antes de qualquer escrita.
    A disputa pelo horário é resolvida pelo índice único parcial: quem perde
    recebe SlotTaken. Não há nova tentativa automática.
    """
    if status not in ACTIVE_STATUSES:
        raise BookingRuleViolation(f"Status inicial inválido: {status}")

    now = now or clinic_now()
    _check_booking_rules(data, now)
    _check_people(session, client_id, partner_id)
    _check_plan(session, client_id, data)

    appointment = Appointment(
        user_id=client_id,
        partner_id=partner_id,
        service_slug=data.service_slug,
        service_title=data.service_title,
        appointment_date=data.appointment_date,
        appointment_time=data.appointment_time,
        status=status,
        plan_id=data.plan_id,
        session_number=data.session_number,
        notes=data.notes,
    )

    try:
        # reservas abandonadas não podem segurar o índice do horário
        reap_stale_pending(session)
        session.add(appointment)
        session.commit()
    except IntegrityError as exc:
        session.rollback()
        logger.info(
            "Horário %s %s já ocupado (cliente %s): %s",
            data.appointment_date, data.appointment_time, client_id, exc.orig,
        )
        raise SlotTaken("Horário já reservado. Escolha outro horário.") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Erro ao gravar agendamento do cliente %s: %s", client_id, exc)
        raise ReservationFailed("Erro ao agendar. Tente novamente em instantes.") from exc

    session.refresh(appointment)
    logger.info(
        "Agendamento %s criado: cliente=%s %s %s status=%s",
        appointment.id, client_id, appointment.appointment_date,
        appointment.appointment_time, appointment.status,
    )
    return appointment


# =========================
# TRANSIÇÕES DE STATUS
# =========================
def _get_appointment(session: Session, appointment_id: int) -> Appointment:
    appt = session.get(Appointment, appointment_id)
    if not appt:
        raise NotFound("Agendamento não encontrado")
    return appt


def _transition(session: Session, appt: Appointment, new_status: str) -> Appointment:
    if new_status not in ALLOWED_TRANSITIONS[appt.status]:
        raise InvalidTransition(
            f"Não é possível mudar de {appt.status} para {new_status}"
        )

    appt.status = new_status
    if new_status == CANCELLED:
        appt.cancelled_at = utcnow()

    session.add(appt)
    session.commit()
    session.refresh(appt)
    logger.info("Agendamento %s -> %s", appt.id, new_status)
    return appt


def confirm_appointment(session: Session, appointment_id: int, actor: User) -> Appointment:
    """pending -> confirmed (após o pagamento)."""
    appt = _get_appointment(session, appointment_id)
    if actor.role != "admin" and appt.user_id != actor.id:
        raise PermissionDenied("Sem permissão")
    return _transition(session, appt, CONFIRMED)


def cancel_appointment(session: Session, appointment_id: int, actor: User) -> Appointment:
    """Cliente cancela só o que ainda está pendente; admin cancela qualquer ativo."""
    appt = _get_appointment(session, appointment_id)

    if appt.status == CANCELLED:
        return appt

    if actor.role != "admin":
        if appt.user_id != actor.id:
            raise PermissionDenied("Sem permissão")
        if appt.status != PENDING:
            raise PermissionDenied("Agendamento confirmado só pode ser cancelado pela clínica")

    return _transition(session, appt, CANCELLED)


def assign_partner(session: Session, appointment_id: int, partner_id: Optional[int]) -> Appointment:
    appt = _get_appointment(session, appointment_id)

    if partner_id is not None:
        _get_partner(session, partner_id)

    appt.partner_id = partner_id
    session.add(appt)
    session.commit()
    session.refresh(appt)
    return appt


def list_appointments(
    session: Session,
    actor: User,
    day=None,
    status: Optional[str] = None,
) -> List[Appointment]:
    query = select(Appointment)

    if actor.role == "partner":
        query = query.where(Appointment.partner_id == actor.id)
    elif actor.role != "admin":
        query = query.where(Appointment.user_id == actor.id)

    if day is not None:
        query = query.where(Appointment.appointment_date == day)
    if status:
        query = query.where(Appointment.status == status)

    query = query.order_by(Appointment.appointment_date, Appointment.appointment_time)
    return session.exec(query).all()
