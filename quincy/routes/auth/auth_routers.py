from fastapi import APIRouter, Depends, HTTPException
from loguru import logger
from sqlalchemy.orm import Session

from quincy.core.database import get_db
from quincy.core.security import (
    verify_password,
    create_access_token,
    get_current_user
)
from quincy.models.user_db.user_db import User
from quincy.models.user_db.user_db_crud import (
    complete_onboarding,
    create_user,
    get_user_by_email,
    get_user_by_username,
)
from quincy.schemas.login.login_base import LoginRequest, OnboardingPayload, TokenOut
from quincy.schemas.users.user_base import UserCreate, UserOut
from quincy.services.music_profile import EventIntent, Genre, MusicIdentity
from quincy.services.progress import progress_broadcaster

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@auth_router.post("/signup", response_model=TokenOut, status_code=201)
def signup(payload: UserCreate, db: Session = Depends(get_db)):
    if get_user_by_email(db, payload.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    if get_user_by_username(db, payload.username):
        raise HTTPException(status_code=400, detail="Username already taken")

    user = create_user(db, payload)
    logger.info("User {} signed up", user.id)
    token = create_access_token({"sub": str(user.id)})
    return {"user": user, "token": token}


@auth_router.post("/login", response_model=TokenOut)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    token = create_access_token({"sub": str(user.id)})
    return {"user": user, "token": token}


@auth_router.get("/me", response_model=UserOut)
def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@auth_router.get("/music-identities")
def get_music_identities():
    return [identity.value for identity in MusicIdentity]


@auth_router.get("/genres")
def get_genres():
    return [genre.value for genre in Genre]


@auth_router.get("/event-intents")
def get_event_intents():
    return [intent.value for intent in EventIntent]


@auth_router.post("/onboarding/complete", response_model=UserOut)
def finish_onboarding(
    data: OnboardingPayload,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = complete_onboarding(db, current_user, data)
    progress_broadcaster.refresh(db, user.id)
    return user
