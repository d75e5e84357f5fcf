from sqlmodel import SQLModel, Field


# chaves reconhecidas (valores booleanos gravados como "true"/"false")
NOTIFICATION_KEYS = (
    "evolution_enabled",
    "evolution_notifications_enabled",
    "evolution_api_url",
    "evolution_api_key",
    "evolution_instance_name",
    "whatsapp_msg_reminder_enabled",
    "whatsapp_msg_reminder_text",
)


class NotificationSetting(SQLModel, table=True):
    key: str = Field(primary_key=True)
    value: str = ""
