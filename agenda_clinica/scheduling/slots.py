"""Regras de calendário da clínica: horários fixos, horizonte e domingos."""

from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional

from agenda_clinica.core.config import settings


# horários fixos de atendimento (o último começa exatamente às 18:00)
TIME_SLOTS = (
    "08:00", "09:00", "10:00", "11:00",
    "12:00", "13:00", "14:00", "15:00",
    "16:00", "17:00", "18:00",
)

SUNDAY = 6


def clinic_tz() -> timezone:
    return timezone(timedelta(hours=settings.CLINIC_UTC_OFFSET_HOURS))


def utcnow() -> datetime:
    """Instante atual em UTC, com tzinfo (carimbos de criação/atualização)."""
    return datetime.now(timezone.utc)


def clinic_now() -> datetime:
    """Hora local da clínica (sem tzinfo), independente do fuso do servidor."""
    return datetime.now(clinic_tz()).replace(tzinfo=None)


def max_booking_date(today: date) -> date:
    return today + timedelta(days=settings.BOOKING_HORIZON_DAYS)


def date_closed_reason(day: date, today: date) -> Optional[str]:
    """Motivo pelo qual a data não pode ser oferecida, ou None se estiver aberta."""
    if day < today:
        return "Data no passado"
    if day > max_booking_date(today):
        return f"Agendamento permitido até {settings.BOOKING_HORIZON_DAYS} dias"
    if day.weekday() == SUNDAY:
        return "Domingos indisponíveis"
    return None


def is_date_bookable(day: date, today: date) -> bool:
    return date_closed_reason(day, today) is None


def is_slot_past(day: date, slot: str, now: datetime) -> bool:
    # hoje: horários iguais ou anteriores ao HH:MM atual já passaram
    if day < now.date():
        return True
    if day > now.date():
        return False
    return slot <= now.strftime("%H:%M")


def slot_minutes(slot: str) -> int:
    hours, minutes = slot.split(":")
    return int(hours) * 60 + int(minutes)


def order_slots(slots: Iterable[str]) -> List[str]:
    """Filtra para a enumeração fixa e devolve na ordem do dia."""
    present = set(slots)
    return [s for s in TIME_SLOTS if s in present]


def describe_day(day: date, occupied: Iterable[str], now: datetime) -> dict:
    occupied = order_slots(occupied)
    reason = date_closed_reason(day, now.date())

    slots = []
    for slot in TIME_SLOTS:
        is_occupied = slot in occupied
        past = is_slot_past(day, slot, now)
        slots.append({
            "time": slot,
            "occupied": is_occupied,
            "past": past,
            "available": reason is None and not is_occupied and not past,
        })

    return {
        "day": day.isoformat(),
        "is_closed": reason is not None,
        "reason": reason,
        "occupied": occupied,
        "available": [s["time"] for s in slots if s["available"]],
        "slots": slots,
    }
