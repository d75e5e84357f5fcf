"""Disparo dos lembretes pela linha de comando (crontab, a cada 5-30 min).

    */10 * * * * python -m agenda_clinica.scripts.send_reminders
"""

import json
import logging

from sqlmodel import Session

from agenda_clinica.core.config import settings
from agenda_clinica.database import engine
from agenda_clinica.services.notification_config import load_notification_config
from agenda_clinica.services.reminders import dispatch_reminders


def main():
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    with Session(engine) as session:
        config = load_notification_config(session)
        result = dispatch_reminders(session, config)

    print(json.dumps(result, ensure_ascii=False))


if __name__ == "__main__":
    main()
