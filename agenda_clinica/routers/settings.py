from typing import Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from agenda_clinica.core.security import get_current_admin
from agenda_clinica.database import get_session
from agenda_clinica.models.notification_setting import NotificationSetting
from agenda_clinica.models.user import User
from agenda_clinica.services.notification_config import NotificationConfig, read_notification_values


router = APIRouter(prefix="/settings", tags=["settings"])


class NotificationSettingsUpdate(BaseModel):
    evolution_enabled: Optional[bool] = None
    evolution_notifications_enabled: Optional[bool] = None
    evolution_api_url: Optional[str] = None
    evolution_api_key: Optional[str] = None
    evolution_instance_name: Optional[str] = None
    whatsapp_msg_reminder_enabled: Optional[bool] = None
    whatsapp_msg_reminder_text: Optional[str] = None


def _mask(value: str) -> str:
    if not value:
        return ""
    return "•" * max(len(value) - 4, 0) + value[-4:]


def _public_view(values: Dict[str, str]) -> Dict:
    config = NotificationConfig.from_values(values)
    return {
        "evolution_enabled": config.enabled,
        "evolution_notifications_enabled": config.notifications_enabled,
        "evolution_api_url": config.api_url,
        "evolution_api_key": _mask(config.api_key),
        "evolution_instance_name": config.instance_name,
        "whatsapp_msg_reminder_enabled": config.reminder_enabled,
        "whatsapp_msg_reminder_text": config.reminder_text,
        "is_configured": config.is_configured,
    }


@router.get("/notifications")
def get_notification_settings(
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    return _public_view(read_notification_values(session))


@router.put("/notifications")
def update_notification_settings(
    payload: NotificationSettingsUpdate,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    for key, value in payload.model_dump(exclude_none=True).items():
        if isinstance(value, bool):
            value = "true" if value else "false"

        row = session.get(NotificationSetting, key)
        if row:
            row.value = value
        else:
            row = NotificationSetting(key=key, value=value)
        session.add(row)

    session.commit()
    return _public_view(read_notification_values(session))
