"""Erros de domínio da agenda.

Os serviços levantam estas exceções; o handler do app traduz para resposta JSON.
"""


class SchedulingError(Exception):
    """Base de todos os erros de agendamento."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class BookingRuleViolation(SchedulingError):
    """Data ou horário fora das regras (passado, domingo, além do horizonte)."""


class DateNotBookable(BookingRuleViolation):
    pass


class SlotNotSelectable(BookingRuleViolation):
    pass


class PlanValidationError(SchedulingError):
    pass


class InvalidTransition(SchedulingError):
    pass


class NotFound(SchedulingError):
    status_code = 404


class PermissionDenied(SchedulingError):
    status_code = 403


class SlotTaken(SchedulingError):
    """Outro agendamento ativo ocupou o horário entre a leitura e a gravação."""

    status_code = 409


class AvailabilityUnavailable(SchedulingError):
    """Falha de leitura dos horários ocupados; o chamador pode tentar de novo."""

    status_code = 503


class ReservationFailed(SchedulingError):
    status_code = 503
