import logging
from datetime import date
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from agenda_clinica.core.errors import AvailabilityUnavailable
from agenda_clinica.models.appointment import Appointment, ACTIVE_STATUSES
from agenda_clinica.scheduling.slots import order_slots
from agenda_clinica.services.reaper import reap_stale_pending

logger = logging.getLogger(__name__)


def occupied_slots(session: Session, day: date) -> List[str]:
    """Horários ocupados (confirmed/pending) do dia, na ordem da agenda.

    Lista vazia significa dia livre. Em falha de leitura levanta
    AvailabilityUnavailable: nunca devolve "tudo livre" por engano.
    """
    try:
        reap_stale_pending(session)
        rows = session.exec(
            select(Appointment.appointment_time).where(
                Appointment.appointment_date == day,
                Appointment.status.in_(ACTIVE_STATUSES),
            )
        ).all()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("Erro ao ler horários ocupados de %s: %s", day, exc)
        raise AvailabilityUnavailable(
            "Não foi possível carregar os horários. Tente novamente."
        ) from exc

    return order_slots(rows)
