import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session

from agenda_clinica.core.config import settings
from agenda_clinica.models.appointment import Appointment, CANCELLED, PENDING
from agenda_clinica.scheduling.slots import utcnow

logger = logging.getLogger(__name__)


def reap_stale_pending(
    session: Session,
    now: Optional[datetime] = None,
    max_age: Optional[timedelta] = None,
) -> int:
    """Cancela reservas "pending" abandonadas, liberando o horário.

    ``now`` é UTC com tzinfo (mesma base de ``created_at``). Confirmados nunca são tocados.
    """
    now = now or utcnow()
    max_age = max_age or timedelta(minutes=settings.STALE_PENDING_MINUTES)
    cutoff = now - max_age

    result = session.exec(
        update(Appointment)
        .where(Appointment.status == PENDING, Appointment.created_at < cutoff)
        .values(status=CANCELLED, cancelled_at=now, updated_at=now)
    )
    session.commit()

    if result.rowcount:
        logger.info("Reaper: %s reserva(s) pendente(s) expirada(s)", result.rowcount)
    return result.rowcount or 0
