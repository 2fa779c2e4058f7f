from fastapi import APIRouter, Depends, Response, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError
from app.db.session import get_db
from app.routers.deps import get_token
from app.schemas.auth import LoginRequest, TokenResponse
from app.services.sessions import SessionStore, get_session_store
from app.services.users import login, logout

router = APIRouter(tags=["auth"])
basic_auth = HTTPBasic(auto_error=False)


@router.post("/auth/login", response_model=TokenResponse)
def login_json(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
) -> TokenResponse:
    return TokenResponse(token=login(db, sessions, payload.email, payload.password))


@router.get("/connect", response_model=TokenResponse)
def connect(
    credentials: HTTPBasicCredentials | None = Depends(basic_auth),
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
) -> TokenResponse:
    if credentials is None:
        raise AuthenticationError()
    return TokenResponse(token=login(db, sessions, credentials.username, credentials.password))


@router.post("/auth/logout", status_code=status.HTTP_204_NO_CONTENT)
@router.get("/disconnect", status_code=status.HTTP_204_NO_CONTENT)
def disconnect(
    token: str | None = Depends(get_token),
    sessions: SessionStore = Depends(get_session_store),
) -> Response:
    if not token:
        raise AuthenticationError()
    logout(sessions, token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
