from app.schemas.auth import LoginRequest, TokenResponse, UserCreate, UserRead
from app.schemas.file import FileCreate, FileRead

__all__ = [
    "UserCreate",
    "UserRead",
    "LoginRequest",
    "TokenResponse",
    "FileCreate",
    "FileRead",
]
