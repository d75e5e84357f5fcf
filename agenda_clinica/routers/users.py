from fastapi import APIRouter, Depends
from sqlmodel import Session

from agenda_clinica.core.security import get_current_user
from agenda_clinica.database import get_session
from agenda_clinica.models.user import ProfileUpdate, User

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me")
def read_me(current_user: User = Depends(get_current_user)):
    return current_user


# telefone é o destino dos lembretes
@router.patch("/me")
def update_me(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)

    session.add(current_user)
    session.commit()
    session.refresh(current_user)
    return current_user
