"""Seletor de data/horário em duas etapas.

Modela o fluxo da tela de agendamento do cliente; o servidor não o usa.

Estados: SELECTING_DATE -> SELECTING_TIME -> CONFIRMING. O único retorno
permitido é ``back()``, que volta para a escolha da data e descarta o horário.

``load_occupied(day)`` devolve os horários ocupados (ou levanta uma exceção);
``submit(day, slot)`` grava o agendamento (ou levanta uma exceção).
"""

import logging
from datetime import date, datetime
from enum import Enum
from typing import Callable, Iterable, List, Optional

from agenda_clinica.core.errors import DateNotBookable, SlotNotSelectable
from agenda_clinica.scheduling.slots import (
    TIME_SLOTS,
    clinic_now,
    date_closed_reason,
    is_slot_past,
)

logger = logging.getLogger(__name__)


class PickerStep(str, Enum):
    SELECTING_DATE = "calendar"
    SELECTING_TIME = "time"
    CONFIRMING = "confirm"


class SlotPicker:
    def __init__(
        self,
        load_occupied: Callable[[date], Iterable[str]],
        submit: Callable[[date, str], object],
        clock: Callable[[], datetime] = clinic_now,
    ):
        self._load_occupied = load_occupied
        self._submit = submit
        self._clock = clock

        self.step = PickerStep.SELECTING_DATE
        self.selected_date: Optional[date] = None
        self.selected_time: Optional[str] = None
        # None = desconhecido (ainda não carregou ou falhou)
        self.occupied: Optional[set] = None
        self.error: Optional[str] = None
        self.in_flight = False
        self.closed = False
        self.result = None

    # ---------- data ----------
    def select_date(self, day: date) -> None:
        if self.step == PickerStep.CONFIRMING:
            raise DateNotBookable("Volte ao calendário para trocar a data")

        reason = date_closed_reason(day, self._clock().date())
        if reason:
            raise DateNotBookable(reason)

        self.selected_date = day
        self.selected_time = None
        self.step = PickerStep.SELECTING_TIME
        self._refresh()

    def retry(self) -> None:
        if self.selected_date is not None:
            self._refresh()

    def _refresh(self) -> None:
        self.occupied = None
        self.error = None
        try:
            self.occupied = set(self._load_occupied(self.selected_date))
        except Exception as exc:
            logger.warning("Falha ao carregar horários de %s: %s", self.selected_date, exc)
            self.error = "Não foi possível carregar os horários. Tente novamente."

    # ---------- horário ----------
    def is_selectable(self, slot: str) -> bool:
        if self.selected_date is None or self.occupied is None:
            return False
        if slot not in TIME_SLOTS or slot in self.occupied:
            return False
        return not is_slot_past(self.selected_date, slot, self._clock())

    def selectable_slots(self) -> List[str]:
        return [s for s in TIME_SLOTS if self.is_selectable(s)]

    def select_time(self, slot: str) -> None:
        if self.step not in (PickerStep.SELECTING_TIME, PickerStep.CONFIRMING):
            raise SlotNotSelectable("Escolha uma data primeiro")
        if not self.is_selectable(slot):
            raise SlotNotSelectable(f"Horário {slot} indisponível")
        self.selected_time = slot
        self.step = PickerStep.CONFIRMING

    def back(self) -> None:
        if self.in_flight:
            return
        self.selected_time = None
        self.step = PickerStep.SELECTING_DATE

    # ---------- confirmação ----------
    @property
    def can_confirm(self) -> bool:
        return (
            not self.closed
            and not self.in_flight
            and self.step == PickerStep.CONFIRMING
            and self.selected_time is not None
            and self.is_selectable(self.selected_time)
        )

    def confirm(self) -> bool:
        if not self.can_confirm:
            return False

        self.in_flight = True
        self.error = None
        try:
            self.result = self._submit(self.selected_date, self.selected_time)
        except Exception as exc:
            logger.warning(
                "Falha ao agendar %s %s: %s", self.selected_date, self.selected_time, exc
            )
            self.error = "Erro ao agendar. Tente novamente em instantes."
            return False
        finally:
            self.in_flight = False

        self.closed = True
        return True

    def dismiss(self) -> None:
        self.closed = True
