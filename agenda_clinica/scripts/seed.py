from sqlmodel import Session, select

from agenda_clinica.core.security import token_for_user
from agenda_clinica.database import create_db_and_tables, engine
from agenda_clinica.models.client_plan import ClientPlan
from agenda_clinica.models.notification_setting import NotificationSetting
from agenda_clinica.models.user import User


ADMIN_EMAIL = "admin@rosadelis.com.br"
CLIENT_EMAIL = "cliente@gmail.com"


def _get_or_create_user(session: Session, email: str, **fields) -> User:
    user = session.exec(select(User).where(User.email == email)).first()
    if user:
        return user
    user = User(email=email, **fields)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def main():
    create_db_and_tables()

    with Session(engine) as session:
        # 1) usuários de teste
        admin = _get_or_create_user(
            session, ADMIN_EMAIL, full_name="Administração", phone="11999990000", role="admin"
        )
        client = _get_or_create_user(
            session, CLIENT_EMAIL, full_name="Maria Teste", phone="(11) 98888-7777", role="user"
        )
        partner = _get_or_create_user(
            session, "parceira@rosadelis.com.br", full_name="Ana Parceira", phone="11977776666", role="partner"
        )

        # 2) plano de 5 sessões para a cliente (se não existir)
        existing_plan = session.exec(
            select(ClientPlan).where(ClientPlan.user_id == client.id)
        ).first()
        if not existing_plan:
            session.add(
                ClientPlan(
                    user_id=client.id,
                    service_slug="limpeza-de-pele",
                    service_title="Limpeza de Pele",
                    plan_name="Essencial",
                    total_sessions=5,
                )
            )

        # 3) WhatsApp desligado até configurar a Evolution API
        for key, value in {
            "evolution_enabled": "false",
            "evolution_notifications_enabled": "false",
            "whatsapp_msg_reminder_enabled": "false",
        }.items():
            if not session.get(NotificationSetting, key):
                session.add(NotificationSetting(key=key, value=value))

        session.commit()

        print("✅ Seed concluído!")
        print(f"Admin: {admin.id} ({admin.email})  token: {token_for_user(admin)}")
        print(f"Cliente: {client.id} ({client.email})  token: {token_for_user(client)}")
        print(f"Parceira: {partner.id} ({partner.email})")
        print("Plano: Limpeza de Pele, 5 sessões (se não existia)")


if __name__ == "__main__":
    main()
