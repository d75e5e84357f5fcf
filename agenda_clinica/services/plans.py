import logging
from typing import List, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from agenda_clinica.core.errors import NotFound
from agenda_clinica.models.appointment import Appointment, ACTIVE_STATUSES
from agenda_clinica.models.client_plan import (
    PLAN_ACTIVE,
    PLAN_COMPLETED,
    ClientPlan,
    ClientPlanCreate,
)
from agenda_clinica.models.user import User

logger = logging.getLogger(__name__)


def apply_session_delta(plan: ClientPlan, delta: int) -> ClientPlan:
    """Soma ``delta`` às sessões concluídas, limitado a [0, total]."""
    plan.completed_sessions = max(0, min(plan.total_sessions, plan.completed_sessions + delta))
    plan.status = PLAN_COMPLETED if plan.completed_sessions >= plan.total_sessions else PLAN_ACTIVE
    return plan


def create_plan(session: Session, data: ClientPlanCreate, created_by: str = "admin") -> ClientPlan:
    client = session.get(User, data.user_id)
    if not client:
        raise NotFound("Cliente não encontrado")

    plan = ClientPlan(
        user_id=data.user_id,
        service_slug=data.service_slug,
        service_title=data.service_title,
        plan_name=data.plan_name,
        total_sessions=data.total_sessions,
        completed_sessions=0,
        status=PLAN_ACTIVE,
        created_by=created_by,
        notes=data.notes,
    )
    session.add(plan)
    session.commit()
    session.refresh(plan)
    logger.info("Plano %s criado para cliente %s (%s sessões)", plan.id, plan.user_id, plan.total_sessions)
    return plan


def adjust_sessions(session: Session, plan_id: int, delta: int) -> ClientPlan:
    plan = session.get(ClientPlan, plan_id)
    if not plan:
        raise NotFound("Plano não encontrado")

    apply_session_delta(plan, delta)
    session.add(plan)
    session.commit()
    session.refresh(plan)
    return plan


def next_session_number(session: Session, plan: ClientPlan) -> Optional[int]:
    """Próxima sessão a agendar; None quando o plano já está todo agendado."""
    highest = session.exec(
        select(func.max(Appointment.session_number)).where(
            Appointment.plan_id == plan.id,
            Appointment.status.in_(ACTIVE_STATUSES),
        )
    ).one()
    candidate = max(highest or 0, plan.completed_sessions) + 1
    return candidate if candidate <= plan.total_sessions else None


def list_plans(session: Session, actor: User, user_id: Optional[int] = None) -> List[ClientPlan]:
    query = select(ClientPlan).order_by(ClientPlan.created_at.desc())
    if actor.role != "admin":
        query = query.where(ClientPlan.user_id == actor.id)
    elif user_id is not None:
        query = query.where(ClientPlan.user_id == user_id)
    return session.exec(query).all()
