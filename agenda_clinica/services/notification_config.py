from dataclasses import dataclass
from typing import Dict, Optional

from sqlmodel import Session, select

from agenda_clinica.models.notification_setting import NOTIFICATION_KEYS, NotificationSetting
from agenda_clinica.services.whatsapp import EvolutionGateway


DEFAULT_REMINDER_TEXT = (
    "Olá {nome}! 🔔 Lembrete: você tem um agendamento de *{servico}* "
    "hoje às *{hora}*. Te esperamos! 💖"
)


@dataclass(frozen=True)
class NotificationConfig:
    """Configuração de WhatsApp carregada uma vez por requisição/execução."""

    enabled: bool = False
    notifications_enabled: bool = False
    api_url: str = ""
    api_key: str = ""
    instance_name: str = ""
    reminder_enabled: bool = False
    reminder_text: str = DEFAULT_REMINDER_TEXT

    @classmethod
    def from_values(cls, values: Dict[str, str]) -> "NotificationConfig":
        def flag(key: str) -> bool:
            return values.get(key) == "true"

        return cls(
            enabled=flag("evolution_enabled"),
            notifications_enabled=flag("evolution_notifications_enabled"),
            api_url=(values.get("evolution_api_url") or "").rstrip("/"),
            api_key=values.get("evolution_api_key") or "",
            instance_name=values.get("evolution_instance_name") or "",
            reminder_enabled=flag("whatsapp_msg_reminder_enabled"),
            reminder_text=values.get("whatsapp_msg_reminder_text") or DEFAULT_REMINDER_TEXT,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_url and self.api_key and self.instance_name)

    def skip_reason(self) -> Optional[str]:
        """Motivo para não enviar notificações, ou None se tudo estiver pronto."""
        if not (self.enabled and self.notifications_enabled):
            return "Notifications disabled"
        if not self.is_configured:
            return "Evolution API not configured"
        return None

    def gateway(self) -> EvolutionGateway:
        return EvolutionGateway(self.api_url, self.api_key, self.instance_name)


def read_notification_values(session: Session) -> Dict[str, str]:
    rows = session.exec(
        select(NotificationSetting).where(NotificationSetting.key.in_(NOTIFICATION_KEYS))
    ).all()
    return {row.key: row.value for row in rows}


def load_notification_config(session: Session) -> NotificationConfig:
    return NotificationConfig.from_values(read_notification_values(session))
