from uuid import UUID
from sqlalchemy.orm import Session
from quincy.core.errors import store_call
from quincy.models.user_db.user_db import User
from quincy.schemas.users.user_base import UserCreate
from quincy.schemas.login.login_base import OnboardingPayload
from quincy.core.security import hash_password


@store_call
def create_user(db: Session, user: UserCreate):
    db_user = User(
        email=user.email,
        username=user.username,
        display_name=user.display_name or user.username,
        hashed_password=hash_password(user.password),
        phone=user.phone,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


@store_call
def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()


@store_call
def get_user_by_username(db: Session, username: str):
    return db.query(User).filter(User.username == username).first()


@store_call
def get_user_by_id(db: Session, user_id: UUID):
    return db.query(User).filter(User.id == user_id).first()


@store_call
def complete_onboarding(db: Session, user: User, data: OnboardingPayload):
    user.display_name = data.display_name
    user.music_identity = data.music_identity.value if data.music_identity else None
    user.top_genres = [genre.value for genre in data.top_genres]
    user.event_intent = data.event_intent.value if data.event_intent else None
    user.instagram_handle = data.instagram_handle or None
    user.onboarding_completed = True

    db.commit()
    db.refresh(user)
    return user
