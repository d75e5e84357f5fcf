import logging

from sqlmodel import SQLModel, Session, create_engine

from agenda_clinica.core.config import settings

logger = logging.getLogger(__name__)

connect_args = {}
if settings.DATABASE_URL.startswith("sqlite"):
    # FastAPI roda handlers síncronos em threads diferentes
    connect_args = {"check_same_thread": False}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args, pool_pre_ping=True)


def create_db_and_tables():
    # importa os modelos para registrar as tabelas no metadata
    from agenda_clinica.models import appointment, client_plan, notification_setting, user  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Tabelas verificadas/criadas")


def get_session():
    with Session(engine) as session:
        yield session
