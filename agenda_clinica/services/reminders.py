"""
Lembretes de agendamento (~1h antes) via WhatsApp.

Chamado periodicamente por um agendador externo. Cada execução:
  1. pega a hora local da clínica (UTC-3 fixo);
  2. busca os confirmados de hoje com reminder_sent = false;
  3. mantém os que começam entre agora+45min e agora+75min;
  4. envia a mensagem e marca reminder_sent = true (mesmo se o envio falhar).

Com execuções a cada <= 30 minutos cada agendamento cai na janela uma vez;
a flag reminder_sent impede repetição se o disparo rodar em duplicidade.
"""

import logging
from datetime import datetime
from typing import Optional, Tuple

from sqlmodel import Session, select

from agenda_clinica.core.config import settings
from agenda_clinica.models.appointment import CONFIRMED, Appointment
from agenda_clinica.models.user import User
from agenda_clinica.scheduling.slots import clinic_now, slot_minutes
from agenda_clinica.services.notification_config import NotificationConfig
from agenda_clinica.services.notifications import format_date_br
from agenda_clinica.services.whatsapp import normalize_phone

logger = logging.getLogger(__name__)


def _skipped(reason: str) -> dict:
    logger.info("Lembretes ignorados: %s", reason)
    return {"skipped": True, "reason": reason}


def reminder_window(now: datetime) -> Tuple[int, int]:
    """Janela [início, fim] em minutos do dia, ambos inclusivos."""
    current = now.hour * 60 + now.minute
    return (
        current + settings.REMINDER_WINDOW_START_MINUTES,
        current + settings.REMINDER_WINDOW_END_MINUTES,
    )


def render_reminder(template: str, client_name: Optional[str], appt: Appointment) -> str:
    return (
        template.replace("{nome}", client_name or "Cliente")
        .replace("{servico}", appt.service_title)
        .replace("{data}", format_date_br(appt.appointment_date))
        .replace("{hora}", appt.appointment_time)
    )


def dispatch_reminders(
    session: Session,
    config: NotificationConfig,
    gateway=None,
    now: Optional[datetime] = None,
) -> dict:
    if not (config.enabled and config.notifications_enabled):
        return _skipped("Notifications disabled")
    if not config.reminder_enabled:
        return _skipped("Reminder notifications disabled")
    if not config.is_configured:
        return _skipped("Evolution API not configured")

    now = now or clinic_now()

    appointments = session.exec(
        select(Appointment).where(
            Appointment.appointment_date == now.date(),
            Appointment.status == CONFIRMED,
            Appointment.reminder_sent == False,  # noqa: E712
        )
    ).all()
    if not appointments:
        return _skipped("No appointments to remind")

    start, end = reminder_window(now)
    to_remind = [a for a in appointments if start <= slot_minutes(a.appointment_time) <= end]
    if not to_remind:
        return _skipped("No appointments in reminder window")

    user_ids = {a.user_id for a in to_remind}
    profiles = {u.id: u for u in session.exec(select(User).where(User.id.in_(user_ids))).all()}

    gateway = gateway or config.gateway()
    results = []

    for appt in to_remind:
        client = profiles.get(appt.user_id)
        if not client or not client.phone:
            logger.info("Agendamento %s sem telefone do cliente %s, pulando", appt.id, appt.user_id)
            continue

        number = normalize_phone(client.phone)
        message = render_reminder(config.reminder_text, client.full_name, appt)

        try:
            ok = gateway.send_text(client.phone, message)

            # marca mesmo em falha de envio: no máximo um lembrete por agendamento
            appt.reminder_sent = True
            session.add(appt)
            session.commit()
        except Exception:
            session.rollback()
            logger.exception("Falha no lembrete do agendamento %s", appt.id)
            results.append({"appointment_id": appt.id, "phone": number, "success": False})
            continue

        results.append({"appointment_id": appt.id, "phone": number, "success": ok})

    logger.info("Lembretes processados: %s", len(results))
    return {"success": True, "reminders_sent": len(results), "results": results}
