from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from quluub import models
from quluub.crud import user as user_crud
from quluub.database import get_db
from quluub.schemas.user import ChangePasswordRequest, ClientOnboarding, UserPublic, UserSettingsUpdate
from quluub.services import counselor_service
from quluub.utils.security import get_current_user, get_password_hash, verify_password

router = APIRouter(prefix="/users", tags=["Users"])


# ======================
# GET: Counselor directory
# ======================
@router.get("/counselors")
def list_counselors(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return counselor_service.list_counselors(db)


# ======================
# PUT: Client onboarding
# ======================
@router.put("/onboarding", response_model=UserPublic)
def complete_onboarding(
    payload: ClientOnboarding,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user_crud.update_user(db, current_user, payload.model_dump())
    current_user.onboarding_completed = True
    db.commit()
    db.refresh(current_user)
    return current_user


# ======================
# PUT: Settings (partial)
# ======================
@router.put("/settings", response_model=UserPublic)
def update_settings(
    payload: UserSettingsUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user_crud.update_user(db, current_user, payload.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(current_user)
    return current_user


@router.put("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if not verify_password(payload.current_password, current_user.password_hash):
        raise HTTPException(status_code=400, detail="Current password is incorrect")

    current_user.password_hash = get_password_hash(payload.new_password)
    db.commit()
    return {"message": "Password updated successfully"}


# ======================
# GET: Public profile
# ======================
@router.get("/{user_id}", response_model=UserPublic)
def get_user_profile(
    user_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user = user_crud.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
