from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from agenda_clinica.core.security import get_current_admin, get_current_user
from agenda_clinica.database import get_session
from agenda_clinica.models.client_plan import ClientPlan, ClientPlanCreate, SessionAdjust
from agenda_clinica.models.user import User
from agenda_clinica.services import plans


router = APIRouter(prefix="/plans", tags=["plans"])


@router.get("/")
def list_plans(
    user_id: Optional[int] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return plans.list_plans(session, current_user, user_id=user_id)


@router.post("/", status_code=status.HTTP_201_CREATED)
def create_plan(
    payload: ClientPlanCreate,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    return plans.create_plan(session, payload)


@router.patch("/{plan_id}/sessions")
def adjust_sessions(
    plan_id: int,
    payload: SessionAdjust,
    session: Session = Depends(get_session),
    current_admin: User = Depends(get_current_admin),
):
    return plans.adjust_sessions(session, plan_id, payload.delta)


@router.get("/{plan_id}/next-session")
def next_session(
    plan_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    plan = session.get(ClientPlan, plan_id)
    if not plan or (current_user.role != "admin" and plan.user_id != current_user.id):
        raise HTTPException(status_code=404, detail="Plano não encontrado")

    return {
        "plan_id": plan.id,
        "total_sessions": plan.total_sessions,
        "completed_sessions": plan.completed_sessions,
        "next_session_number": plans.next_session_number(session, plan),
    }
