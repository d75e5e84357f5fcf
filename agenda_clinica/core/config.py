"""Configurações da aplicação lidas do ambiente (.env)."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Banco
    DATABASE_URL: str = "sqlite:///./agenda_clinica.db"

    # JWT (emitido pela plataforma de identidade, só validamos aqui)
    SECRET_KEY: str = "dev-only-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Fuso fixo da clínica (Brasília, UTC-3), independente do servidor
    CLINIC_UTC_OFFSET_HOURS: int = -3
    CLINIC_NAME: str = "Rosa de Lis - Estética Avançada"

    # Regras de agenda
    BOOKING_HORIZON_DAYS: int = 60
    STALE_PENDING_MINUTES: int = 30

    # Janela do lembrete (minutos a partir de agora)
    REMINDER_WINDOW_START_MINUTES: int = 45
    REMINDER_WINDOW_END_MINUTES: int = 75

    # Chamadas externas
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Protege o disparo agendado dos lembretes (vazio = sem proteção)
    CRON_SECRET: str = ""

    LOG_LEVEL: str = "INFO"


settings = Settings()
