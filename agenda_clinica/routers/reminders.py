from fastapi import APIRouter, Depends
from sqlmodel import Session

from agenda_clinica.core.deps import get_gateway, get_notification_config, require_cron_secret
from agenda_clinica.database import get_session
from agenda_clinica.services.notification_config import NotificationConfig
from agenda_clinica.services.reminders import dispatch_reminders


router = APIRouter(prefix="/reminders", tags=["reminders"])


# chamado pelo agendador externo (cron) a cada poucos minutos
@router.post("/dispatch", dependencies=[Depends(require_cron_secret)])
def dispatch(
    session: Session = Depends(get_session),
    config: NotificationConfig = Depends(get_notification_config),
    gateway=Depends(get_gateway),
):
    return dispatch_reminders(session, config, gateway)
