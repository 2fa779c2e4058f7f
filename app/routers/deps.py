from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError
from app.db.session import get_db
from app.models.user import User
from app.services.access import authorize
from app.services.sessions import SessionStore, get_session_store
from app.services.users import get_user


def get_token(x_token: str | None = Header(default=None)) -> str | None:
    return x_token


def get_current_user_id(
    token: str | None = Depends(get_token),
    sessions: SessionStore = Depends(get_session_store),
) -> str:
    return authorize(sessions, token)


def get_current_user(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)) -> User:
    user = get_user(db, user_id)
    if not user:
        # Session outlived its user.
        raise AuthenticationError()
    return user
