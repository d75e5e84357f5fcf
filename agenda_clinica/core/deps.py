"""Dependências compartilhadas pelos routers."""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlmodel import Session

from agenda_clinica.core.config import settings
from agenda_clinica.database import get_session
from agenda_clinica.services.notification_config import NotificationConfig, load_notification_config


def get_notification_config(session: Session = Depends(get_session)) -> NotificationConfig:
    # lido uma vez por requisição e repassado explicitamente aos serviços
    return load_notification_config(session)


def get_gateway(config: NotificationConfig = Depends(get_notification_config)):
    return config.gateway()


def require_cron_secret(x_cron_secret: Optional[str] = Header(default=None)) -> None:
    if settings.CRON_SECRET and x_cron_secret != settings.CRON_SECRET:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Cron secret inválido")
