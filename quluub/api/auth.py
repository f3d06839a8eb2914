import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from quluub import models
from quluub.crud import user as user_crud
from quluub.database import get_db
from quluub.models.user import ROLE_ADMIN, ROLE_COUNSELOR
from quluub.schemas.auth import LoginRequest, SignupRequest, Token
from quluub.services import counselor_service, wallet_service
from quluub.utils.security import authenticate_user, create_user_token, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _token_response(user: models.User) -> dict:
    return {
        "access_token": create_user_token(user),
        "token_type": "bearer",
        "role": user.role
    }


def _login(db: Session, credentials: LoginRequest) -> models.User:
    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(status_code=400, detail="Invalid credentials")
    if user.is_suspended:
        raise HTTPException(status_code=403, detail="Your account has been suspended")
    return user


# ===== SIGNUP ENDPOINT =====

@router.post("/signup", response_model=Token, status_code=status.HTTP_201_CREATED)
def signup(user_data: SignupRequest, db: Session = Depends(get_db)):
    """Register a client or counselor and return an access token"""
    if user_crud.get_user_by_email(db, user_data.email):
        raise HTTPException(status_code=400, detail="User already exists")

    try:
        new_user = user_crud.create_user(
            db,
            first_name=user_data.first_name,
            last_name=user_data.last_name,
            email=user_data.email,
            password=user_data.password,
            role=user_data.role,
        )
        wallet_service.get_or_create_wallet(db, new_user.id)
        db.commit()
        db.refresh(new_user)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Signup failed for %s: %r", user_data.email, e)
        raise HTTPException(status_code=500, detail="Internal server error")

    logger.info("New %s account %s", new_user.role, new_user.id)
    return _token_response(new_user)


# ===== LOGIN ENDPOINTS =====

@router.post("/login", response_model=Token)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Verify credentials and return access token"""
    return _token_response(_login(db, credentials))


@router.post("/admin/login", response_model=Token)
def admin_login(credentials: LoginRequest, db: Session = Depends(get_db)):
    """Login endpoint restricted to admin accounts only."""
    user = _login(db, credentials)
    if (user.role or "").lower() != ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="Admin access only")
    return _token_response(user)


# ===== CURRENT USER =====

@router.get("/me")
def me(current_user: models.User = Depends(get_current_user)):
    """Current user; counselors get their professional profile merged in."""
    data = {
        "id": current_user.id,
        "first_name": current_user.first_name,
        "last_name": current_user.last_name,
        "name": current_user.name,
        "email": current_user.email,
        "role": current_user.role,
        "phone": current_user.phone,
        "is_verified": current_user.is_verified,
        "onboarding_completed": current_user.onboarding_completed,
        "date_of_birth": current_user.date_of_birth,
        "country": current_user.country,
        "city": current_user.city,
        "marital_status": current_user.marital_status,
        "nationality": current_user.nationality,
    }
    if current_user.role == ROLE_COUNSELOR:
        data.update(counselor_service.serialize_profile(current_user.counselor_profile))
        data["average_rating"] = current_user.average_rating
        data["reviews_count"] = current_user.reviews_count
    return data
