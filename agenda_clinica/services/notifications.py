"""Avisos de novo agendamento para a equipe (admins e parceira atribuída)."""

import logging
from datetime import date
from typing import Iterable, List, NamedTuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from agenda_clinica.core.config import settings
from agenda_clinica.models.appointment import Appointment
from agenda_clinica.models.user import User
from agenda_clinica.services.notification_config import NotificationConfig
from agenda_clinica.services.post_commit import PostCommitTasks

logger = logging.getLogger(__name__)


class StaffAlert(NamedTuple):
    appointment_id: int
    kind: str  # admin | partner
    phone: str
    text: str


def format_date_br(day: date) -> str:
    return day.strftime("%d/%m/%Y")


def _render(title: str, client_name: str, appt: Appointment) -> str:
    return (
        f"📋 *{title}*\n\n"
        f"👤 *Cliente:* {client_name}\n"
        f"💆 *Serviço:* {appt.service_title}\n"
        f"📅 *Data:* {format_date_br(appt.appointment_date)}\n"
        f"🕐 *Horário:* {appt.appointment_time}\n\n"
        f"_{settings.CLINIC_NAME}_"
    )


def build_staff_alerts(session: Session, appointments: Iterable[Appointment]) -> List[StaffAlert]:
    appointments = list(appointments)
    if not appointments:
        return []

    user_ids = {a.user_id for a in appointments} | {a.partner_id for a in appointments if a.partner_id}
    people = {u.id: u for u in session.exec(select(User).where(User.id.in_(user_ids))).all()}
    admin_phones = [
        u.phone for u in session.exec(select(User).where(User.role == "admin")).all() if u.phone
    ]

    alerts: List[StaffAlert] = []
    for appt in appointments:
        client = people.get(appt.user_id)
        client_name = (client.full_name if client else None) or "Cliente"

        message = _render("Novo Agendamento", client_name, appt)
        for phone in admin_phones:
            alerts.append(StaffAlert(appt.id, "admin", phone, message))

        partner = people.get(appt.partner_id) if appt.partner_id else None
        if partner and partner.phone:
            alerts.append(
                StaffAlert(appt.id, "partner", partner.phone, _render("Agendamento Atribuído a Você", client_name, appt))
            )
    return alerts


def enqueue_new_appointment_alerts(
    session: Session,
    config: NotificationConfig,
    gateway,
    appointments: Iterable[Appointment],
    tasks: PostCommitTasks,
) -> int:
    """Agenda os avisos para depois do commit. Nunca falha o agendamento."""
    reason = config.skip_reason()
    if reason:
        logger.info("Avisos de agendamento ignorados: %s", reason)
        return 0

    try:
        alerts = build_staff_alerts(session, appointments)
    except SQLAlchemyError as exc:
        logger.error("Não foi possível montar avisos de agendamento: %s", exc)
        return 0

    for alert in alerts:
        tasks.add(
            f"whatsapp-{alert.kind}-appointment-{alert.appointment_id}",
            gateway.send_text,
            alert.phone,
            alert.text,
        )
    return len(alerts)
