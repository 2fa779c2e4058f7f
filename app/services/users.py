import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError, ConflictError
from app.core.security import hash_password, verify_password
from app.models.user import User
from app.services.sessions import SessionStore

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(db: Session, user_id: str | None) -> User | None:
    if not user_id:
        return None
    return db.scalar(select(User).where(User.id == user_id))


def register_user(db: Session, email: str, password: str) -> User:
    normalized = normalize_email(email)
    if db.scalar(select(User).where(User.email == normalized)):
        raise ConflictError()
    user = User(email=normalized, password_hash=hash_password(password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost a race against a concurrent registration for the same email.
        db.rollback()
        raise ConflictError() from exc
    db.refresh(user)
    logger.info("user_registered", extra={"user_id": user.id})
    return user


def login(db: Session, sessions: SessionStore, email: str, password: str) -> str:
    user = db.scalar(select(User).where(User.email == normalize_email(email)))
    if not user or not verify_password(password, user.password_hash):
        raise AuthenticationError()
    return sessions.create(user.id)


def logout(sessions: SessionStore, token: str) -> None:
    sessions.revoke(token)


def count_users(db: Session) -> int:
    return db.scalar(select(func.count(User.id))) or 0
